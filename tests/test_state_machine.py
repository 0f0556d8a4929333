# tests/test_state_machine.py
import pytest

from gadget_api.core.errors import InvalidIdentifier, InvalidInput, InvalidStatus
from gadget_api.core.state_machine import GadgetStatus, can_transit, normalize_status
from gadget_api.core.validation import is_valid_uuid, parse_gadget_id, require_text


@pytest.mark.parametrize("raw, expected", [
    ("deployed", GadgetStatus.Deployed),
    ("DEPLOYED", GadgetStatus.Deployed),
    ("Deployed", GadgetStatus.Deployed),
    ("  available ", GadgetStatus.Available),
    ("decommissioned", GadgetStatus.Decommissioned),
    (GadgetStatus.Destroyed, GadgetStatus.Destroyed),
])
def test_normalize_status_case_insensitive(raw, expected):
    assert normalize_status(raw) is expected


@pytest.mark.parametrize("raw", ["", None, "lost", "De ployed", "availablee"])
def test_normalize_status_rejects_unknown(raw):
    with pytest.raises(InvalidStatus) as ei:
        normalize_status(raw)
    assert ei.value.message == "Given status does not exist"
    assert ei.value.status_code == 400


def test_guarded_targets_reject_self_transition():
    assert not can_transit(GadgetStatus.Decommissioned, GadgetStatus.Decommissioned)
    assert not can_transit(GadgetStatus.Destroyed, GadgetStatus.Destroyed)


@pytest.mark.parametrize("src", list(GadgetStatus))
def test_guarded_targets_reachable_from_other_states(src):
    for dst in (GadgetStatus.Decommissioned, GadgetStatus.Destroyed):
        assert can_transit(src, dst) == (src != dst)


def test_non_guarded_targets_are_not_offered():
    # 没有任何受保护入口能回到 Available / Deployed
    for src in GadgetStatus:
        assert not can_transit(src, GadgetStatus.Available)
        assert not can_transit(src, GadgetStatus.Deployed)


def test_parse_gadget_id_canonicalizes():
    raw = "5198499C-2C35-4CFE-9587-6C4AF7F40663"
    assert parse_gadget_id(raw) == raw.lower()
    assert is_valid_uuid(raw)


@pytest.mark.parametrize("raw", ["", "not-a-uuid", "1234", "5198499c-2c35-4cfe-9587"])
def test_parse_gadget_id_rejects_garbage(raw):
    assert not is_valid_uuid(raw)
    with pytest.raises(InvalidIdentifier):
        parse_gadget_id(raw)


def test_require_text():
    assert require_text("Grappling Hook", "name") == "Grappling Hook"
    with pytest.raises(InvalidInput):
        require_text("   ", "name")
    with pytest.raises(InvalidInput):
        require_text("x" * 256, "name")
