import io

import pytest

from trafficreg.shell import (
    MSG_DUPLICATE,
    MSG_EMPTY,
    MSG_GOODBYE,
    MSG_INVALID,
    MSG_NOT_FOUND,
    MSG_NOT_INTEGER,
    MSG_SAVE_FAILED,
    InteractiveShell,
    InvalidMenuChoiceError,
    parse_choice,
    render_menu,
)


def run(store, text):
    out = io.StringIO()
    InteractiveShell(store, stdin=io.StringIO(text), stdout=out).run()
    return out.getvalue()


@pytest.mark.parametrize("raw, expected", [("1", 1), (" 6 \n", 6), ("3", 3)])
def test_parse_choice_accepts_menu_numbers(raw, expected):
    assert parse_choice(raw) == expected


@pytest.mark.parametrize("raw", ["0", "7", "-1", "abc", "", "2.5"])
def test_parse_choice_rejects_everything_else(raw):
    with pytest.raises(InvalidMenuChoiceError):
        parse_choice(raw)


def test_menu_lists_six_options():
    menu = render_menu()

    for n in range(1, 7):
        assert f"\n{n}. " in menu
    assert "6. Exit" in menu


def test_register_then_view(store, data_file):
    output = run(store, "1\n7\nMain St, North\n50\n30\n2\n6\n")

    assert "Traffic Signal registered successfully!" in output
    assert "Signal ID: 7 | Location: Main St, North | Traffic Density: 50%" in output
    assert output.rstrip().endswith(MSG_GOODBYE)
    assert store.find(7).timing == 30
    assert data_file.read_text(encoding="utf-8") == '7,"Main St, North",50,30,0\n'


def test_duplicate_id_aborts_registration_without_more_prompts(seeded_store):
    output = run(seeded_store, "1\n1\n6\n")

    assert MSG_DUPLICATE in output
    assert "Enter Location" not in output
    assert len(seeded_store) == 3
    assert seeded_store.find(1).location == "Main St"


def test_view_empty_store(store):
    output = run(store, "2\n6\n")

    assert MSG_EMPTY in output


def test_update_density_flips_congestion(seeded_store):
    output = run(seeded_store, "3\n1\n95\n6\n")

    assert "Traffic density updated successfully!" in output
    assert seeded_store.find(1).congested
    assert seeded_store.find(1).timing == 30


def test_update_timing(seeded_store):
    output = run(seeded_store, "4\n2\n60\n6\n")

    assert "Signal timing updated successfully!" in output
    assert seeded_store.find(2).timing == 60
    assert seeded_store.find(2).density == 85


@pytest.mark.parametrize("choice", ["3", "4"])
def test_update_unknown_id_reports_not_found_and_skips_value_prompt(seeded_store, choice):
    output = run(seeded_store, f"{choice}\n42\n6\n")

    assert MSG_NOT_FOUND in output
    assert "Enter New" not in output
    assert MSG_GOODBYE in output


def test_delete_present_and_absent(seeded_store):
    output = run(seeded_store, "5\n2\n5\n2\n6\n")

    assert output.count("Traffic signal deleted successfully!") == 1
    assert MSG_NOT_FOUND in output
    assert [r.id for r in seeded_store] == [1, 3]


def test_invalid_choices_redisplay_menu(store):
    output = run(store, "9\nabc\n6\n")

    assert output.count(MSG_INVALID) == 2
    assert output.count("===== Smart Traffic Management System =====") == 3


def test_non_integer_argument_reprompts(seeded_store):
    output = run(seeded_store, "5\nthree\n3\n6\n")

    assert MSG_NOT_INTEGER in output
    assert 3 not in seeded_store


def test_end_of_input_stops_loop(seeded_store):
    output = run(seeded_store, "")

    assert "Enter your choice: " in output
    assert len(seeded_store) == 3


def test_end_of_input_mid_registration_registers_nothing(store, data_file):
    run(store, "1\n5\nSomewhere\n")

    assert len(store) == 0
    assert not data_file.exists()


def test_failed_save_keeps_menu_running(seeded_store, monkeypatch):
    def refuse(*args, **kwargs):
        raise OSError(30, "Read-only file system")

    monkeypatch.setattr(seeded_store, "persist", refuse)

    output = run(seeded_store, "1\n9\nNew\n10\n10\n3\n1\n95\n4\n1\n5\n5\n1\n2\n6\n")

    assert output.count(MSG_SAVE_FAILED) == 4
    assert MSG_GOODBYE in output
    assert [r.id for r in seeded_store] == [1, 2, 3]
    assert seeded_store.find(1).density == 50
    assert "Signal ID: 1 | Location: Main St | Traffic Density: 50%" in output
