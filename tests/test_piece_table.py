from __future__ import annotations

import random

import pytest

from piece_editor.buffer import (
    BufferReleasedError,
    IndexOutOfRange,
    PieceTable,
    Span,
    SpanSource,
)
from piece_editor.runtime import telemetry

SAMPLE = b"This is some test data!\nThis is more data."
MULTILINE = (
    b"This is some test data!\nThis is more data.\nThis, yet again, is data\n"
    b"You're never going to believe it!\nI found some more data."
)


def make_table(text: bytes = SAMPLE, **kwargs) -> PieceTable:
    return PieceTable(text, **kwargs)


def assert_no_empty_spans(table: PieceTable) -> None:
    assert all(span.length > 0 for span in table.spans())


def test_init_round_trips_text() -> None:
    table = make_table()

    assert table.text() == SAMPLE
    assert table.length() == len(SAMPLE)
    assert table.spans() == (Span(SpanSource.ORIGINAL, 0, len(SAMPLE)),)


def test_init_empty_has_no_spans() -> None:
    table = PieceTable(b"")

    assert table.text() == b""
    assert table.length() == 0
    assert table.spans() == ()


def test_init_accepts_str_and_bytearray() -> None:
    assert PieceTable("héllo").text() == "héllo".encode("utf-8")
    assert PieceTable.init(bytearray(b"abc")).text() == b"abc"


def test_init_rejects_non_text() -> None:
    with pytest.raises(TypeError):
        PieceTable(42)  # type: ignore[arg-type]


def test_text_is_an_independent_snapshot() -> None:
    table = make_table()
    first = table.text()
    table.insert(0, b"X")

    assert first == SAMPLE
    assert table.text() == b"X" + SAMPLE
    assert table.text() == table.text()


def test_insert_scenario() -> None:
    table = make_table()

    table.insert(5, b"certainly ")
    table.insert(42, b"not ")
    table.insert(0, b"Hello!\n")

    assert table.text() == (
        b"Hello!\nThis certainly is some test data!\nThis is not more data."
    )
    assert table.length() == len(table.text())
    assert_no_empty_spans(table)


def test_remove_scenario() -> None:
    table = make_table()

    table.remove(5, 3)
    table.remove(26, 3)
    table.remove(19, 1)
    table.remove(34, 1)

    assert table.text() == b"This some test data\nThis more data"
    assert table.length() == len(table.text())


def test_insert_mid_span_splits_into_three() -> None:
    table = PieceTable(b"abcdef")

    table.insert(3, b"XY")

    assert table.text() == b"abcXYdef"
    assert table.spans() == (
        Span(SpanSource.ORIGINAL, 0, 3),
        Span(SpanSource.CHANGES, 0, 2),
        Span(SpanSource.ORIGINAL, 3, 3),
    )


def test_insert_at_start_does_not_leave_empty_span() -> None:
    table = PieceTable(b"abc")

    table.insert(0, b">")

    assert table.text() == b">abc"
    assert table.spans() == (
        Span(SpanSource.CHANGES, 0, 1),
        Span(SpanSource.ORIGINAL, 0, 3),
    )


def test_insert_at_span_boundary() -> None:
    table = PieceTable(b"abcdef")
    table.insert(3, b"-")

    table.insert(4, b"+")

    assert table.text() == b"abc-+def"
    assert_no_empty_spans(table)


def test_insert_at_end_of_non_empty_document_appends_once() -> None:
    table = PieceTable(b"abc")

    table.insert(table.length(), b"def")

    assert table.text() == b"abcdef"
    assert table.spans() == (
        Span(SpanSource.ORIGINAL, 0, 3),
        Span(SpanSource.CHANGES, 0, 3),
    )


def test_insert_at_end_of_empty_document() -> None:
    table = PieceTable(b"")

    table.insert(table.length(), b"first")
    table.insert(table.length(), b" second")

    assert table.text() == b"first second"
    assert table.spans() == (
        Span(SpanSource.CHANGES, 0, 5),
        Span(SpanSource.CHANGES, 5, 7),
    )


def test_insert_empty_data_is_a_no_op() -> None:
    table = PieceTable(b"abc")

    table.insert(1, b"")

    assert table.spans() == (Span(SpanSource.ORIGINAL, 0, 3),)


@pytest.mark.parametrize("index", [-1, len(SAMPLE) + 1, len(SAMPLE) + 100])
def test_insert_out_of_range_leaves_document_unchanged(index: int) -> None:
    table = make_table()

    with pytest.raises(IndexOutOfRange):
        table.insert(index, b"Not allowed")

    assert table.text() == SAMPLE
    assert table._changes.used == 0


def test_index_out_of_range_is_an_index_error() -> None:
    table = make_table()

    with pytest.raises(IndexError):
        table.insert(len(SAMPLE) + 1, b"x")


def test_remove_out_of_range_leaves_document_unchanged() -> None:
    table = make_table()

    with pytest.raises(IndexOutOfRange) as info:
        table.remove(len(SAMPLE), 1)

    assert info.value.index == len(SAMPLE)
    assert info.value.limit == len(SAMPLE)
    assert table.text() == SAMPLE


def test_remove_rejects_start_before_opening_span(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    opened = []

    def fake_span(name, **kwargs):
        opened.append(name)
        raise AssertionError("span opened for an invalid remove")

    monkeypatch.setattr(telemetry, "span", fake_span)
    table = PieceTable(b"abc")

    with pytest.raises(IndexOutOfRange):
        table.remove(3, 2)

    assert opened == []
    assert table.text() == b"abc"


def test_remove_is_not_atomic() -> None:
    table = PieceTable(b"abc")

    with pytest.raises(IndexOutOfRange):
        table.remove(1, 5)

    assert table.text() == b"a"


def test_remove_zero_count_is_a_no_op() -> None:
    table = PieceTable(b"abc")

    table.remove(10, 0)

    assert table.text() == b"abc"


def test_remove_negative_count_rejected() -> None:
    with pytest.raises(ValueError):
        PieceTable(b"abc").remove(0, -1)


def test_remove_one_cases() -> None:
    table = PieceTable(b"abcdef")

    table.remove_one(5)
    assert table.spans() == (Span(SpanSource.ORIGINAL, 0, 5),)

    table.remove_one(0)
    assert table.spans() == (Span(SpanSource.ORIGINAL, 1, 4),)

    table.remove_one(2)
    assert table.text() == b"bce"
    assert table.spans() == (
        Span(SpanSource.ORIGINAL, 1, 2),
        Span(SpanSource.ORIGINAL, 4, 1),
    )


def test_remove_drops_exhausted_spans() -> None:
    table = PieceTable(b"ab")
    table.insert(1, b"X")

    table.remove(1, 1)

    assert table.text() == b"ab"
    assert len(table.spans()) == 2
    assert_no_empty_spans(table)


def test_remove_everything_then_insert() -> None:
    table = PieceTable(b"abc")

    table.remove(0, 3)
    assert table.spans() == ()

    table.insert(0, b"new")
    assert table.text() == b"new"


def test_line_indexing_example() -> None:
    table = PieceTable(b"ab\ncd\nef")

    assert [table.line_start(line) for line in range(3)] == [0, 3, 6]
    assert [table.line_length(line) for line in range(3)] == [2, 2, 2]
    with pytest.raises(IndexOutOfRange):
        table.line_start(3)
    with pytest.raises(IndexOutOfRange):
        table.line_length(3)


def test_line_start_of_various_lines() -> None:
    table = make_table(MULTILINE)

    assert [table.line_start(line) for line in range(5)] == [0, 24, 43, 68, 102]
    assert [table.line_length(line) for line in range(5)] == [23, 18, 24, 33, 23]
    assert table.line_count() == 5


def test_line_start_after_edits() -> None:
    table = make_table(MULTILINE)

    table.remove(0, 23)
    table.insert(0, b"This is different test data.")
    table.insert(29, b"More different data!\nWith a newline.\n")

    assert [table.line_start(line) for line in range(7)] == [
        0,
        29,
        50,
        66,
        85,
        110,
        144,
    ]


def test_line_length_after_edits() -> None:
    table = make_table(MULTILINE)

    table.remove(5, 3)
    table.remove(26, 3)
    table.remove(41, 12)
    table.remove(57, 45)
    table.insert(62, b"\nWe're all data.")

    assert [table.line_length(line) for line in range(5)] == [20, 15, 12, 12, 15]


def test_trailing_newline_opens_empty_line() -> None:
    table = PieceTable(b"ab\n")

    assert table.line_start(1) == 3
    assert table.line_length(1) == 0
    assert table.line_count() == 2


def test_empty_document_lines() -> None:
    table = PieceTable(b"")

    assert table.line_start(0) == 0
    assert table.line_length(0) == 0
    with pytest.raises(IndexOutOfRange):
        table.line_start(1)


def test_negative_line_rejected() -> None:
    with pytest.raises(IndexOutOfRange):
        PieceTable(b"abc").line_start(-1)


def test_changes_buffer_growth_keeps_spans_valid() -> None:
    table = PieceTable(b"", changes_capacity=4)

    for chunk in (b"abc", b"de", b"f" * 20):
        table.insert(table.length(), chunk)

    assert table.text() == b"abcde" + b"f" * 20
    assert table._changes.capacity >= 25


def test_release_frees_storage() -> None:
    table = make_table()

    table.release()
    table.release()

    assert table.released
    with pytest.raises(BufferReleasedError):
        table.text()
    with pytest.raises(BufferReleasedError):
        table.insert(0, b"x")


def test_context_manager_releases() -> None:
    with PieceTable(b"abc") as table:
        table.insert(3, b"d")
        assert table.text() == b"abcd"

    assert table.released


def test_random_edits_match_bytearray_model() -> None:
    rng = random.Random(1234)
    model = bytearray(SAMPLE)
    table = make_table(changes_capacity=8)

    for _ in range(400):
        if model and rng.random() < 0.45:
            index = rng.randrange(len(model))
            count = rng.randint(1, min(4, len(model) - index))
            table.remove(index, count)
            del model[index : index + count]
        else:
            index = rng.randint(0, len(model))
            data = bytes(rng.choice(b"abc\n") for _ in range(rng.randint(1, 5)))
            table.insert(index, data)
            model[index:index] = data

        assert table.length() == len(model)

    assert table.text() == bytes(model)
    assert_no_empty_spans(table)
    lines = bytes(model).split(b"\n")
    assert table.line_count() == len(lines)
    offset = 0
    for number, line in enumerate(lines):
        assert table.line_start(number) == offset
        assert table.line_length(number) == len(line)
        offset += len(line) + 1
