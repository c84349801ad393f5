"""Test configuration and fixtures for ObjMocker tests."""

import pytest

import objmocker
from objmocker import GlobalDefaults, ObjectMocker
from objmocker.core.catalog import ValueGeneratorCatalog
from objmocker.core.classifier import PropertyClassifier
from objmocker.core.configuration import ConfigurationStore
from objmocker.core.models import GeneratorParams


@pytest.fixture(autouse=True)
def reset_default_mocker():
    """Every test starts and ends with factory configuration."""
    objmocker.reset()
    yield
    objmocker.reset()


@pytest.fixture
def mocker_engine():
    """An isolated engine, independent of the module-level one."""
    return ObjectMocker()


@pytest.fixture
def store():
    return ConfigurationStore()


@pytest.fixture
def classifier():
    return PropertyClassifier()


@pytest.fixture
def catalog():
    return ValueGeneratorCatalog()


@pytest.fixture
def default_params():
    """Generator parameters carrying factory defaults only."""
    return GeneratorParams(defaults=GlobalDefaults())
