"""Analysis services for Solana Holders."""
