import unittest

from ppm_survey.catalog import Question, QuestionCatalog, form_id_for
from ppm_survey.exceptions import CatalogError

from conftest import CATALOG_PAYLOAD


class TestQuestionCatalog(unittest.TestCase):
    def setUp(self):
        self.catalog = QuestionCatalog.from_dict(CATALOG_PAYLOAD)

    def test_forms_and_lookups(self):
        self.assertEqual([f.id for f in self.catalog.forms], ["f1", "f2", "f3"])
        self.assertEqual(self.catalog.lookups["SISTEMAS_ESSENCIAIS"], ["ERP", "CRM"])
        self.assertEqual(self.catalog.get_form("f2").title, "Funcionalidades")
        self.assertIsNone(self.catalog.get_form("f4"))

    def test_inactive_questions_are_hidden_by_default(self):
        ids = [q.id for _f, q in self.catalog.iter_questions()]
        self.assertNotIn("f1_q03", ids)
        self.assertEqual(self.catalog.question_count(), 5)
        self.assertEqual(self.catalog.question_count(include_inactive=True), 6)
        self.assertEqual(len(self.catalog.get_form("f1").active_questions()), 2)

    def test_find_question(self):
        question = self.catalog.find_question("f3_q01")
        self.assertEqual(question.type, "escala_0_10")
        self.assertEqual(question.label, "Nota das integrações")
        self.assertIsNone(self.catalog.find_question("f3_q99"))

    def test_round_trips_to_dict(self):
        self.assertEqual(QuestionCatalog.from_dict(self.catalog.to_dict()), self.catalog)

    def test_unknown_form_id_is_rejected(self):
        with self.assertRaises(CatalogError):
            QuestionCatalog.from_dict({"forms": [{"id": "f4", "questions": []}]})

    def test_question_without_type_is_rejected(self):
        with self.assertRaises(CatalogError):
            Question.from_dict({"id": "f1_q01", "pergunta": "?"})

    def test_only_explicit_false_deactivates(self):
        self.assertTrue(Question.from_dict({"id": "a", "tipo": "texto", "active": None}).active)
        self.assertFalse(Question.from_dict({"id": "a", "tipo": "texto", "active": False}).active)

    def test_english_keys_are_accepted(self):
        question = Question.from_dict(
            {"id": "f2_q09", "type": "texto", "label": "Notes", "category": "Extra"}
        )
        self.assertEqual(question.category, "Extra")
        self.assertEqual(question.label, "Notes")

    def test_form_id_for(self):
        self.assertEqual(form_id_for("f3_q07"), "f3")


if __name__ == "__main__":
    unittest.main()
