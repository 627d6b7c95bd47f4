import random
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from atc_trainer.grader import ReadbackGrader
from atc_trainer.training import Phrase, PhraseCatalog, load_catalog


@pytest.fixture
def catalog():
    """The catalog shipped with the package"""
    return load_catalog()


@pytest.fixture
def small_catalog():
    """Three-phrase catalog for deterministic orchestration tests"""
    return PhraseCatalog([
        Phrase(
            id="ils-08r",
            callsign="WestJet 407",
            atc="WestJet 407, maintain three thousand until established, cleared ILS runway zero eight right.",
            meaning="Hold 3,000 ft until established, then continue the ILS approach to Runway 08R.",
            expected_readback="Maintain three thousand until established, cleared ILS zero eight right, WestJet 407.",
            sector="Approach",
        ),
        Phrase(
            id="lineup-08l",
            callsign="Harbour Air 59",
            atc="Harbour Air 59, line up and wait runway zero eight left.",
            meaning="Enter and hold on 08L.",
            expected_readback="Line up and wait zero eight left, Harbour Air 59.",
            sector="Tower",
        ),
        Phrase(
            id="tower-119-5",
            callsign="Porter 114",
            atc="Porter 114, contact tower one one niner decimal five, good day.",
            meaning="Switch to tower frequency 119.5 MHz.",
            expected_readback="Over to tower on one one niner decimal five, Porter 114.",
            sector="Approach",
        ),
    ])


@pytest.fixture
def grader():
    return ReadbackGrader()


@pytest.fixture
def rng():
    return random.Random(1234)
