"""Unit tests for the CSV exchange codec."""

from __future__ import annotations

import unittest

from ppm_survey.exchange.csv_codec import (
    encode_rows,
    format_value,
    group_rows,
    read_table,
    split_answer,
    split_line_naive,
    validate_consolidated_csv,
)


class TestWriter(unittest.TestCase):
    def test_every_field_is_quoted(self):
        out = encode_rows(("a", "b"), [{"a": "x", "b": 1}])
        self.assertEqual(out, 'a,b\n"x","1"')

    def test_quotes_are_doubled_and_line_breaks_flattened(self):
        out = encode_rows(("a",), [{"a": 'diz "oi"\r\nlinha 2'}])
        self.assertEqual(out.splitlines(), ["a", '"diz ""oi"" linha 2"'])

    def test_format_value(self):
        self.assertEqual(format_value(True), "true")
        self.assertEqual(format_value(False), "false")
        self.assertEqual(format_value(None), "")
        self.assertEqual(format_value(["A", "B"]), "A;B")

    def test_missing_keys_become_empty(self):
        self.assertEqual(encode_rows(("a", "b"), [{"a": "x"}]), 'a,b\n"x",""')

    def test_unicode_line_separators_are_flattened(self):
        out = encode_rows(("a",), [{"a": "um\u2028dois\x85três\x0bquatro"}])
        self.assertEqual(out.splitlines(), ["a", '"um dois três quatro"'])


class TestReader(unittest.TestCase):
    def test_naive_split_strips_quotes(self):
        self.assertEqual(split_line_naive('"a", "b" ,c'), ["a", "b", "c"])
        # embedded commas are not protected by quotes
        self.assertEqual(split_line_naive('"x, y",z'), ["x", "y", "z"])

    def test_read_table_skips_preamble_and_blank_lines(self):
        text = (
            "=== CONSOLIDADO F1 ===\r\n"
            "Total de Entrevistas: 1\r\n"
            "\r\n"
            "respondent_name,question_id,resposta\r\n"
            '"Ana","f1_q01","4"\r\n'
            "\r\n"
        )
        headers, rows = read_table(text)
        self.assertEqual(headers, ["respondent_name", "question_id", "resposta"])
        self.assertEqual(rows, [["Ana", "f1_q01", "4"]])

    def test_read_table_without_question_id_uses_first_line(self):
        headers, rows = read_table("a,b\n1,2\n")
        self.assertEqual(headers, ["a", "b"])
        self.assertEqual(rows, [["1", "2"]])

    def test_read_table_splits_records_on_cr_and_lf_only(self):
        headers, rows = read_table('a,b\r\n"x\u2028y","z\x0cw"\n"1","2"')
        self.assertEqual(headers, ["a", "b"])
        self.assertEqual(rows, [["x\u2028y", "z\x0cw"], ["1", "2"]])

    def test_split_answer(self):
        self.assertEqual(split_answer("A; B;;C"), ["A", "B", "C"])
        self.assertEqual(split_answer("só um"), "só um")


def test_group_rows_by_respondent_and_timestamp():
    headers = [
        "respondent_name",
        "respondent_department",
        "interviewer_name",
        "question_id",
        "resposta",
        "timestamp",
        "is_completed",
    ]
    rows = [
        ["Ana", "PMO", "Bia", "f1_q01", "4", "t1", "true"],
        ["Ana", "PMO", "Bia", "f1_q02", "Sim;Não", "t1", "true"],
        ["Ana", "PMO", "", "f1_q01", "2", "t2", "false"],
        ["", "", "", "f1_q01", "5", "t1", "true"],
        ["respondent_name", "", "", "question_id", "resposta", "", ""],
        ["Caio", "", "", "f1_q01", "", "t1", ""],
    ]
    groups = group_rows(headers, rows)

    assert list(groups) == [("Ana", "t1"), ("Ana", "t2"), ("Caio", "t1")]
    first = groups[("Ana", "t1")]
    assert first.answers == {"f1_q01": "4", "f1_q02": ["Sim", "Não"]}
    assert first.interviewer_name == "Bia"
    assert first.is_completed is True
    assert groups[("Ana", "t2")].is_completed is False
    assert groups[("Caio", "t1")].answers == {}


def test_group_rows_missing_timestamp_uses_default():
    headers = ["respondent_name", "question_id", "resposta"]
    rows = [["Ana", "f1_q01", "4"], ["Ana", "f1_q02", "Sim"]]
    groups = group_rows(headers, rows, default_timestamp="2025-01-01T00:00:00.000Z")
    assert list(groups) == [("Ana", "2025-01-01T00:00:00.000Z")]
    assert len(groups[("Ana", "2025-01-01T00:00:00.000Z")].answers) == 2


def test_validate_reports_itemized_errors():
    assert validate_consolidated_csv("") == [
        "Arquivo deve ter pelo menos cabeçalho e uma linha de dados"
    ]
    assert validate_consolidated_csv("respondent_name,question_id,resposta\n") == [
        "Arquivo deve ter pelo menos cabeçalho e uma linha de dados"
    ]
    errors = validate_consolidated_csv("question_id,nome\nf1_q01,Ana\n")
    assert "Coluna obrigatória não encontrada: respondent_name" in errors
    assert "Coluna obrigatória não encontrada: resposta" in errors
    assert "Nenhum dado válido encontrado no arquivo" in errors


def test_validate_accepts_well_formed_file():
    text = 'respondent_name,question_id,resposta\n"Ana","f1_q01","4"\n'
    assert validate_consolidated_csv(text) == []
