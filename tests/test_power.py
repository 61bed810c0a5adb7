from opskit.power import parse_power_stat

GOOD = (
    "PS1 Status       | C8h | ok  | 10.1 | Presence detected\n"
    "PS2 Status       | C9h | OK  | 10.2 | Presence detected\n"
)


def test_all_ok():
    assert parse_power_stat(GOOD) == 0


def test_one_bad_supply():
    text = GOOD + "PS3 Status       | CAh | cr  | 10.3 | Failure detected\n"
    assert parse_power_stat(text) == 1


def test_empty_output():
    assert parse_power_stat("") == -2


def test_short_and_blank_lines_ignored():
    text = "\n   \nheader | only\n" + GOOD
    assert parse_power_stat(text) == 0


def test_only_unparsable_lines_count_as_ok():
    assert parse_power_stat("no data here\n") == 0