"""ATC phraseology trainer.

Grades pilot readbacks against reference phrases and drives quiz and
readback-session practice on top of the grader.
"""

from .grader import GradeResult, ReadbackGrader, grade
from .training import Phrase, PhraseCatalog, load_catalog

__version__ = "0.1.0"

__all__ = [
    "GradeResult",
    "ReadbackGrader",
    "grade",
    "Phrase",
    "PhraseCatalog",
    "load_catalog",
]
