import pytest

from core.session_manager import SessionManager
from core.state_machine import RoundStateMachine
from models import Recipe
from tests.helpers import ScriptedRecipes, make_settings


@pytest.fixture
def recipe():
    return Recipe(left_track=1, left_token="A", right_track=6, right_token="B")


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def machine(settings, recipe):
    return RoundStateMachine(settings, recipe_generator=ScriptedRecipes(recipe))


@pytest.fixture(autouse=True)
def clear_sessions():
    yield
    SessionManager.clear()
