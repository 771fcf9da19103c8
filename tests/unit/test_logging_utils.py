import logging
from dataclasses import fields

import pytest

from scalemesh.core.actors.config import ActorConfig
from scalemesh.core.utils import configure_runtime_logging, demote_library_logging, resolve_level


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def restore_library_levels():
    names = ("botocore", "boto3", "urllib3", "ray")
    levels = {name: logging.getLogger(name).level for name in names}
    yield names
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_resolve_level_accepts_names_and_numbers():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warning ") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError):
        resolve_level("chatty")


def test_configure_runtime_logging_installs_one_handler(restore_root_logger):
    configure_runtime_logging("INFO")
    configure_runtime_logging("DEBUG")

    tagged = [h for h in restore_root_logger.handlers if getattr(h, "_scalemesh_stream_handler", False)]
    assert len(tagged) == 1
    assert tagged[0].level == logging.DEBUG


def test_demote_library_logging(restore_library_levels):
    demote_library_logging()
    assert all(logging.getLogger(name).level == logging.WARNING for name in restore_library_levels)

    demote_library_logging(logging.ERROR)
    assert logging.getLogger("botocore").level == logging.ERROR


def test_actor_config_carries_only_consumed_fields():
    assert [f.name for f in fields(ActorConfig)] == ["name", "log_level", "max_events"]
    with pytest.raises(TypeError):
        ActorConfig(name="collector", metadata={"team": "infra"})
