from daylog.fold_marker import append_fold_marker, encode_fold_marker, split_fold_marker
from daylog.models import FoldState


def test_encode_fold_marker():
    assert encode_fold_marker(FoldState.CONTENTS_ONLY) == "<!-- daylog:v1 fold=contents -->"


def test_split_fold_marker_reads_state_and_title():
    title, state, present = split_fold_marker(
        " Standup <!-- daylog:v1 fold=collapsed -->"
    )

    assert title == " Standup"
    assert state is FoldState.COLLAPSED
    assert present is True


def test_split_fold_marker_without_marker():
    assert split_fold_marker(" Standup") == (" Standup", FoldState.EXPANDED_ALL, False)
    assert split_fold_marker("") == ("", FoldState.EXPANDED_ALL, False)


def test_unknown_payload_degrades_to_default_and_stays_in_title():
    rest = " Notes <!-- daylog:v2 fold=collapsed -->"

    assert split_fold_marker(rest) == (rest, FoldState.EXPANDED_ALL, False)


def test_unknown_fold_value_degrades_to_default():
    rest = " <!-- daylog:v1 fold=sideways -->"

    assert split_fold_marker(rest) == (rest, FoldState.EXPANDED_ALL, False)


def test_foreign_comments_are_left_alone():
    rest = " Plan <!-- reviewed -->"

    assert split_fold_marker(rest) == (rest, FoldState.EXPANDED_ALL, False)


def test_only_the_trailing_marker_is_decoded():
    title, state, present = split_fold_marker(
        " <!-- daylog:v1 fold=contents --> mid <!-- daylog:v1 fold=collapsed -->"
    )

    assert title == " <!-- daylog:v1 fold=contents --> mid"
    assert state is FoldState.COLLAPSED
    assert present


def test_append_fold_marker_omits_default_state():
    heading = "## [09:00:00] Standup"

    assert append_fold_marker(heading, FoldState.EXPANDED_ALL, False) == heading
    assert append_fold_marker(heading, FoldState.COLLAPSED, False) == (
        "## [09:00:00] Standup <!-- daylog:v1 fold=collapsed -->"
    )


def test_append_fold_marker_keeps_existing_marker_for_default_state():
    assert append_fold_marker("## [09:00:00]", FoldState.EXPANDED_ALL, True) == (
        "## [09:00:00] <!-- daylog:v1 fold=expanded -->"
    )


def test_extra_whitespace_before_marker_stays_in_title():
    assert split_fold_marker("  <!-- daylog:v1 fold=collapsed -->") == (
        " ",
        FoldState.COLLAPSED,
        True,
    )
    assert split_fold_marker("<!-- daylog:v1 fold=contents -->") == (
        "",
        FoldState.CONTENTS_ONLY,
        True,
    )
