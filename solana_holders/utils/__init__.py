"""Shared utilities for Solana Holders."""
