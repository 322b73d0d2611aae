"""golisttests package root."""

from golisttests.driver import extract_file_test_names
from golisttests.exceptions import BudgetExceeded, NeverThrown, ParseFailure
from golisttests.invariants import never
from golisttests.walker import WalkResult, list_test_names

__all__ = [
    "__version__",
    "BudgetExceeded",
    "NeverThrown",
    "ParseFailure",
    "WalkResult",
    "extract_file_test_names",
    "list_test_names",
    "never",
]

__version__ = "0.1.0"
