"""specdoc package root."""

from specdoc.directive import Cond, Directive, Shall, parse_directive
from specdoc.engine import ExpansionResult, SpecDiagnostic, SpecEngine
from specdoc.exceptions import SpecDeclarationError, SpecError, SpecGrammarError
from specdoc.processor import process, process_node

__all__ = [
    "__version__",
    "Cond",
    "Directive",
    "ExpansionResult",
    "Shall",
    "SpecDeclarationError",
    "SpecDiagnostic",
    "SpecEngine",
    "SpecError",
    "SpecGrammarError",
    "parse_directive",
    "process",
    "process_node",
]

__version__ = "0.1.0"
