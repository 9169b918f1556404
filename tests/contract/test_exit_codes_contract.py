from __future__ import annotations

from h2odb.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL

"""Exit code contract: 0 success, 2 rejected batch, 1 fatal."""


def test_exit_code_values():
    assert EXIT_SUCCESS_ALL == 0
    assert EXIT_PARTIAL_FAILURE == 2
    assert EXIT_FATAL == 1
