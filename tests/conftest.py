"""
Pytest configuration and shared fixtures for template_eval tests.
"""

import pytest

from template_eval.config import get_settings
from template_eval.domain.models import ScoredCluster
from template_eval.ingest.answer_key import AnswerKey
from template_eval.ingest.run_log import parse_run_log

ANSWER_KEY_TEXT = """\
0.  MESSAGE: ID                     DEV-MUC3-0001 (NCCOSC)
1.  MESSAGE: TEMPLATE               1
4.  INCIDENT: TYPE                  KIDNAPPING
9.  PERP: INDIVIDUAL ID             "URBAN GUERRILLAS"
10. PERP: ORGANIZATION ID           "FARABUNDO MARTI NATIONAL LIBERATION FRONT" / "FMLN"
12. PHYS TGT: ID                    *
19. HUM TGT: DESCRIPTION            "PEASANTS"
                                    ? "CHILDREN"

0.  MESSAGE: ID                     DEV-MUC3-0002 (NCCOSC)
1.  MESSAGE: TEMPLATE               1 (OPTIONAL)
4.  INCIDENT: TYPE                  BOMBING
6.  INCIDENT: INSTRUMENT ID         "BOMB"

0.  MESSAGE: ID                     DEV-MUC3-0003 (NCCOSC)
1.  MESSAGE: TEMPLATE               *
"""

RUN_LOG_TEXT = """\
Loading clusters...
Cluster KIDNAP = 24
Frame map BOMBING: 7
  Cluster id=24 score=0.5 [ kidnap 0.4 release 0.2 ]
  Cluster id=7 score=0.25 [ bomb 0.6 explode 0.3 ]
  Topic id=165 score=0.3 [ kidnap 0.5 ransom 0.1 ]
  Topic id=170 score=0.2 [ bomb 0.2 ]
1: (1/??) DEV-MUC3-0001
Top 0   24       0.0251
Top 1   7        0.0102
SigSent 0.232 31
SigSent2 0.623 31
Adding Consistent 0.71 40
Fill 24 the urban guerrillas
Fill 24 peasants
guessing slots for story...
2: (2/??) DEV-MUC3-0002
Top 0   7        0.04
Adding Consistent2 id=12 score=0.5 [ bomb 0.3 ]
"""


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are lru_cached; never leak them between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def answer_key_lines():
    return ANSWER_KEY_TEXT.splitlines(keepends=True)


@pytest.fixture
def run_log_lines():
    return RUN_LOG_TEXT.splitlines(keepends=True)


@pytest.fixture
def answer_key(answer_key_lines):
    return AnswerKey.from_lines(answer_key_lines)


@pytest.fixture
def run_log(run_log_lines):
    return parse_run_log(run_log_lines)


def make_cluster(cluster_id: int, score: float = 0.0, **tokens: float) -> ScoredCluster:
    """Build a ScoredCluster from keyword token scores."""
    return ScoredCluster(id=cluster_id, score=score, token_scores=tokens)


@pytest.fixture
def cluster_factory():
    return make_cluster
