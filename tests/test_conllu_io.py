import io

import pytest

from udr_core.errors import ConlluParseError, ParseErrorKind
from udr_core.models import RangeId, SingleId, SubId
from udr_io.conllu_io import (
    AssemblerState,
    ConlluDocument,
    LineSource,
    SentenceAssembler,
    iter_sentences,
    parse_conllu_file,
    parse_conllu_string,
    parse_sentence,
)


def row(*fields):
    return "\t".join(fields)


def word(index, form, head="_", feats="_"):
    return row(str(index), form, "_", "_", "_", feats, head, "_", "_", "_")


def block(*lines):
    return "\n".join(lines) + "\n"


class CountingSource(LineSource):
    """Line source recording how many lines were pulled"""

    def __init__(self, lines):
        self.lines = list(lines)
        self.pulled = 0

    def next_line(self):
        if self.pulled >= len(self.lines):
            return None
        line = self.lines[self.pulled]
        self.pulled += 1
        return line


def test_blank_separated_blocks_yield_one_result_each():
    text = block(word(1, "a"), "", word(1, "b"), word(2, "c"), "", word(1, "d"))
    results = list(parse_conllu_string(text))
    assert [r.ok for r in results] == [True, True, True]
    assert [len(r.sentence) for r in results] == [1, 2, 1]


def test_trailing_sentence_without_blank_line():
    results = list(parse_conllu_string("1\tHello\t_\t_\t_\t_\t_\t_\t_\t_"))
    assert len(results) == 1
    sentence = results[0].unwrap()
    assert len(sentence) == 1
    assert sentence.tokens[0].form == "Hello"


def test_consecutive_blank_lines_do_not_produce_empty_sentences():
    text = block("", "", word(1, "a"), "", "", "", word(1, "b"), "", "")
    results = list(parse_conllu_string(text))
    assert len(results) == 2
    assert all(len(r.sentence) == 1 for r in results)


def test_empty_input_yields_nothing():
    assert list(parse_conllu_string("")) == []
    assert list(parse_conllu_string("\n\n  \n")) == []


def test_sentence_metadata_from_comments():
    text = block("# sent_id = abc123", "# text = Hello", word(1, "Hello"))
    sentence = parse_sentence(text)
    assert sentence.sent_id == "abc123"
    assert sentence.text == "Hello"
    assert sentence.metadata == (("sent_id", "abc123"), ("text", "Hello"))


def test_duplicate_comment_keys_are_all_retained():
    text = block("# note = first", "# note = second", word(1, "a"))
    sentence = parse_sentence(text)
    assert sentence.meta_all("note") == ["first", "second"]
    assert sentence.meta("note") == "second"


def test_plain_comments_get_positional_keys():
    text = block("# newdoc", "# sent_id = s1", "# just a remark", word(1, "a"))
    sentence = parse_sentence(text)
    assert sentence.metadata == (("#1", "newdoc"), ("sent_id", "s1"), ("#3", "just a remark"))
    assert sentence.comments == ("newdoc", "sent_id = s1", "just a remark")


def test_comments_between_tokens_are_kept_in_order():
    text = block("# sent_id = s1", word(1, "a"), "# late = yes", word(2, "b"))
    sentence = parse_sentence(text)
    assert sentence.metadata == (("sent_id", "s1"), ("late", "yes"))
    assert [t.form for t in sentence] == ["a", "b"]


def test_comment_only_block_is_a_sentence_without_tokens():
    results = list(parse_conllu_string(block("# newdoc id = d1", "", word(1, "a"))))
    assert len(results) == 2
    assert len(results[0].sentence) == 0
    assert results[0].sentence.meta("newdoc id") == "d1"


def test_malformed_line_fails_only_its_sentence():
    text = block(
        word(1, "good"),
        "",
        "# sent_id = broken",
        word(1, "kept?"),
        "1\tshort\t_",
        word(3, "after"),
        "",
        word(1, "fine"),
    )
    results = list(parse_conllu_string(text))
    assert [r.ok for r in results] == [True, False, True]

    error = results[1].error
    assert error.kind is ParseErrorKind.MALFORMED_LINE
    assert error.line_number == 5
    assert error.line == "1\tshort\t_"
    assert error.sentence_index == 2
    assert results[1].sentence is None
    assert results[2].sentence.tokens[0].form == "fine"


@pytest.mark.parametrize("bad_line, kind", [
    (row("x", "a", "_", "_", "_", "_", "_", "_", "_", "_"), ParseErrorKind.INVALID_TOKEN_ID),
    (row("2", "a", "_", "_", "_", "_", "root", "_", "_", "_"), ParseErrorKind.INVALID_HEAD),
    (row("2", "a", "_", "_", "_", "Case", "_", "_", "_", "_"), ParseErrorKind.INVALID_FIELD),
    (row("2", "a", "_", "_", "_", "_", "_", "_", "1nsubj", "_"), ParseErrorKind.INVALID_FIELD),
    ("2 a _ _ _ _ _ _ _ _", ParseErrorKind.MALFORMED_LINE),
])
def test_decode_failures_are_reported_with_context(bad_line, kind):
    text = block(word(1, "a"), bad_line, word(3, "c"), "", word(1, "z"))
    results = list(parse_conllu_string(text))
    assert len(results) == 2
    error = results[0].error
    assert error.kind is kind
    assert error.line_number == 2
    assert error.line == bad_line
    assert error.sentence_index == 1
    assert results[1].ok


def test_failure_at_end_of_input():
    results = list(parse_conllu_string(block(word(1, "a"), "1\tbad")))
    assert len(results) == 1
    assert not results[0].ok


def test_error_message_mentions_line():
    results = list(parse_conllu_string(block(word(1, "a"), "oops")))
    assert str(results[0].error).startswith("Parse error in line 2:")


def test_unwrap_raises_parse_error():
    result = next(iter(parse_conllu_string("1\tbad\n")))
    with pytest.raises(ConlluParseError):
        result.unwrap()


def test_document_reads_only_up_to_sentence_boundary():
    source = CountingSource([word(1, "a"), "", word(1, "b"), ""])
    document = ConlluDocument(source)
    first = next(document)
    assert first.sentence.tokens[0].form == "a"
    assert source.pulled == 2
    next(document)
    assert source.pulled == 4
    with pytest.raises(StopIteration):
        next(document)
    with pytest.raises(StopIteration):
        next(document)


def test_document_accepts_plain_iterables():
    results = list(ConlluDocument([word(1, "a") + "\n", "\n", word(1, "b") + "\n"]))
    assert [r.sentence.tokens[0].form for r in results] == ["a", "b"]


def test_document_accepts_text_streams():
    stream = io.StringIO(block(word(1, "a"), "", word(1, "b")))
    assert len(list(ConlluDocument(stream))) == 2


def test_crlf_input():
    text = word(1, "a") + "\r\n" + word(2, "b") + "\r\n\r\n" + word(1, "c") + "\r\n"
    results = list(parse_conllu_string(text))
    assert [len(r.sentence) for r in results] == [2, 1]
    assert results[0].sentence.tokens[0].misc == ()


def test_parsing_is_repeatable():
    text = block("# sent_id = 1", word(1, "a", feats="Case=Nom"), "bad", "", word(1, "b"))
    assert list(parse_conllu_string(text)) == list(parse_conllu_string(text))


def test_lenient_features_via_argument():
    text = block(word(1, "a", feats="Flag"))
    assert not list(parse_conllu_string(text))[0].ok
    result = list(parse_conllu_string(text, strict_features=False))[0]
    assert result.sentence.tokens[0].feats == (("Flag", ""),)


def test_lenient_features_via_environment(monkeypatch):
    monkeypatch.setenv("UDR_STRICT_FEATURES", "false")
    result = list(parse_conllu_string(block(word(1, "a", feats="Flag"))))[0]
    assert result.ok


def test_assembler_states():
    assembler = SentenceAssembler()
    assert assembler.state is AssemblerState.IDLE
    assert assembler.feed("", 1) is None
    assert assembler.state is AssemblerState.IDLE
    assert assembler.feed("# a = b", 2) is None
    assert assembler.state is AssemblerState.BUILDING
    assert assembler.feed(word(1, "x"), 3) is None
    result = assembler.feed("", 4)
    assert result.ok
    assert assembler.state is AssemblerState.IDLE

    failed = assembler.feed("nonsense", 5)
    assert not failed.ok
    assert assembler.state is AssemblerState.DISCARDING
    assert assembler.feed(word(2, "y"), 6) is None
    assert assembler.feed("", 7) is None
    assert assembler.state is AssemblerState.IDLE
    assert assembler.finish() is None
    assert assembler.sentence_count == 2


def test_iter_sentences_raises_by_default():
    with pytest.raises(ConlluParseError):
        list(iter_sentences(parse_conllu_string(block("bad", "", word(1, "a")))))


def test_iter_sentences_skips_and_logs(caplog):
    text = block(word(1, "a"), "", "bad", "", word(1, "b"))
    with caplog.at_level("WARNING", logger="udr_io.conllu_io"):
        sentences = list(iter_sentences(parse_conllu_string(text), skip_errors=True))
    assert [s.tokens[0].form for s in sentences] == ["a", "b"]
    assert "Skipped sentence 2" in caplog.text
    assert caplog.records[0].line_number == 3
    assert caplog.records[0].sentence_index == 2


def test_parse_sentence_rejects_empty_and_multiple():
    with pytest.raises(ValueError):
        parse_sentence("")
    with pytest.raises(ValueError):
        parse_sentence(block(word(1, "a"), "", word(1, "b")))


def test_parse_example_file(example_path):
    results = list(parse_conllu_file(example_path))
    assert len(results) == 3
    assert all(r.ok for r in results)

    first = results[0].sentence
    assert first.sent_id == "1"
    assert first.tokens[0].id == SingleId(1)
    assert first.tokens[0].form == "They"
    assert first.tokens[0].feats == (("Case", "Nom"), ("Number", "Plur"))
    assert [str(d.head) for d in first.tokens[0].deps] == ["2", "4"]
    assert first.tokens[4].misc == ("SpaceAfter=No",)

    second = results[1].sentence
    assert second.text == "vámonos al mar"
    assert [t.id for t in second.multiword_tokens] == [RangeId(1, 2), RangeId(3, 4)]
    assert len(second.words) == 5

    third = results[2].sentence
    assert [t.id for t in third.empty_nodes] == [SubId(5, 1)]
    assert third.get_token(SubId(5, 1)).head is None
    assert len(third) == 7


def test_parse_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(parse_conllu_file(tmp_path / "missing.conllu"))


def test_parse_file_with_encoding(tmp_path):
    path = tmp_path / "latin1.conllu"
    path.write_bytes(word(1, "café").encode("latin-1") + b"\n")
    results = list(parse_conllu_file(path, encoding="latin-1"))
    assert results[0].sentence.tokens[0].form == "café"
