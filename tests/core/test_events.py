import re

from libs.core import events


def test_event_names_are_unique_snake_case():
    names = events.CYCLE_EVENTS + events.ORACLE_EVENTS + events.OPTION_EVENTS + events.SESSION_EVENTS
    assert len(names) == len(set(names))
    for name in names:
        assert re.fullmatch(r"[a-z]+(_[a-z]+)*", name), name
