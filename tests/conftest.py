import pytest

from skirmish.battle.factory import combatant_from_instance
from skirmish.battle.models import CreatureInstance
from skirmish.data.loader import default_data


@pytest.fixture
def data():
    return default_data()


@pytest.fixture
def make_state(data):
    def _make(species_id, level, **kw):
        inst = CreatureInstance(instance_id=kw.pop("instance_id", f"t-{species_id}-{level}"),
                                species_id=species_id, level=level, **kw)
        return combatant_from_instance(inst, data)
    return _make
