"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    analysis_config,
    mint_info,
    fake_sleep,
    mock_chain,
    mock_metadata_provider,
    mock_history_provider,
    history_analyzer,
    holder_classifier,
    splitter,
    lock_estimator,
)
