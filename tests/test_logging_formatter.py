import logging

from utils.logging_formatter import BASIC_FORMAT, DETAILED_FORMAT, LevelFormatter, NoResumeFilter


def make_record(level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord('RoleBot', level, 'role_grants.py', 12, message, None, None, func='grant')


def test_info_uses_basic_format():
    formatter = LevelFormatter(BASIC_FORMAT.format(tag='RoleBot'), DETAILED_FORMAT.format(tag='RoleBot'))

    output = formatter.format(make_record(logging.INFO, 'Granted'))

    assert '[RoleBot] - Granted (role_grants.py)' in output


def test_warning_uses_detailed_format():
    formatter = LevelFormatter(BASIC_FORMAT.format(tag='RoleBot'), DETAILED_FORMAT.format(tag='RoleBot'))

    output = formatter.format(make_record(logging.WARNING, 'Refused'))

    assert '(role_grants.py:grant:12)' in output


def test_colors_wrap_output():
    colors = ('a', 'b', 'c', 'd', 'e')
    formatter = LevelFormatter(BASIC_FORMAT.format(tag='RoleBot'), DETAILED_FORMAT.format(tag='RoleBot'), colors)

    output = formatter.format(make_record(logging.ERROR, 'Failed'))

    assert output.startswith('d')
    assert output.endswith('\x1b[0m')


def test_resumed_events_are_filtered():
    assert not NoResumeFilter().filter(make_record(logging.INFO, 'Shard ID None has successfully RESUMED session'))
    assert NoResumeFilter().filter(make_record(logging.INFO, 'Shard ID None has connected'))
