import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from verse_prosody import set_default_engine
from verse_prosody.config import ProsodySettings
from verse_prosody.core import CMUDictLoader, PronunciationResolver, PronunciationStore
from verse_prosody.engine import ProsodyEngine


SAMPLE_CMUDICT = """\
;;; Small CMU-format dictionary used by the test-suite.
A  AH0
A(2)  EY1
AFTER  AE1 F T ER0
AGAIN  AH0 G EH1 N
AN  AE1 N
BRIGHT  B R AY1 T
DAY  D EY1
FROG  F R AA1 G
FUN  F AH1 N
HAPPY  HH AE1 P IY0
INTO  IH1 N T UW0
JUMPS  JH AH1 M P S
MINE  M AY1 N
NIGHT  N AY1 T
OER  AO1 R
OLD  OW1 L D
PEN  P EH1 N
PLAY  P L EY1
POND  P AA1 N D
PROSE  P R OW1 Z
ROSE  R OW1 Z
SILENCE  S AY1 L AH0 N S
SILENT  S AY1 L AH0 N T
SPLASH  S P L AE1 SH
SUN  S AH1 N
THE  DH AH0
THE(2)  DH AH1
THE(3)  DH IY0
TIME  T AY1 M
WAY  W EY1 # trailing comment
"""

HAIKU = "An old silent pond\nA frog jumps into the pond\nSplash! Silence again"


@pytest.fixture
def cmu_path(tmp_path):
    path = tmp_path / "cmudict.dict"
    path.write_text(SAMPLE_CMUDICT, encoding="utf-8")
    return path


@pytest.fixture
def store():
    return PronunciationStore.from_lines(SAMPLE_CMUDICT.splitlines())


@pytest.fixture
def resolver(store):
    return PronunciationResolver(store)


@pytest.fixture
def degraded_resolver():
    return PronunciationResolver(None)


@pytest.fixture
def engine(store):
    return ProsodyEngine.from_store(store)


@pytest.fixture
def degraded_engine():
    loader = CMUDictLoader(use_pronouncing=False)
    return ProsodyEngine(loader, ProsodySettings(autoload=False))


@pytest.fixture(autouse=True)
def reset_default_engine():
    yield
    set_default_engine(None)
