# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Test helpers for omnibase_dispatch tests.

Available Utilities:
    Console Helpers:
        - make_console: In-memory rich console for CLI output assertions
        - console_text: Text written to such a console

    Log Helpers:
        - filter_records: Log records of one logger at or above a level

    Sample Services:
        - tests.helpers.sample_services: Decorated services and a module-level
          ``registry`` used as ``module:attr`` targets
"""

from tests.helpers.console_helpers import console_text, make_console
from tests.helpers.log_helpers import filter_records

__all__: list[str] = ["console_text", "filter_records", "make_console"]
