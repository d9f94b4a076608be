"""
Gale: a small statically typed expression language.

| Stage                   | Module          | Output                          |
<------------------------ + --------------- + -------------------------------->
| **Tokenizer**           | `tokenizer`     | token list                      |
| **Parser**              | `parser`        | surface tree (`hlr`)            |
| **Type checker**        | `checker`       | checked type, bound context     |
| **Lowerer**             | `lowerer`       | arena tree (`mlr` in FlatTree)  |
| **Analyses**            | `analysis`      | node, scope, type-dep graphs    |
| **Interpreter**         | `interpreter`   | runtime value                   |
"""

from . import errors as _errors
from . import flat_tree as _flat_tree
from . import graph as _graph
from . import types as _types
from . import values as _values
from . import tokenizer as _tokenizer
from . import parser as _parser
from . import checker as _checker
from . import lowerer as _lowerer
from . import analysis as _analysis
from . import interpreter as _interpreter
from . import pipeline as _pipeline
from . import hlr, mlr, values
from .cli import main, parse_args
from ..natives import NativeDeclaration, STANDARD_PRELUDE, standard_prelude

from .errors import *
from .flat_tree import *
from .graph import *
from .types import *
from .values import Value
from .tokenizer import *
from .parser import *
from .checker import *
from .lowerer import *
from .analysis import *
from .interpreter import *
from .pipeline import *

__all__ = []
for module in (
    _errors,
    _flat_tree,
    _graph,
    _types,
    _tokenizer,
    _parser,
    _checker,
    _lowerer,
    _analysis,
    _interpreter,
    _pipeline,
):
    __all__.extend(getattr(module, "__all__", []))
__all__ += ["hlr", "mlr", "values", "Value", "main", "parse_args", "NativeDeclaration", "STANDARD_PRELUDE", "standard_prelude"]
__all__ = list(dict.fromkeys(__all__))
