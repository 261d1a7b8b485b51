"""
QuestionCatalogのテスト
"""
import json

import pytest

from answer_evaluator.constants import DEFAULT_QUESTIONS
from answer_evaluator.errors import InvalidInputError
from answer_evaluator.services.question_service import QuestionCatalog


class TestQuestionCatalog:
    """QuestionCatalogのテストクラス"""

    def test_seeded_with_defaults(self):
        """初期状態は既定の質問リスト"""
        assert QuestionCatalog().questions() == DEFAULT_QUESTIONS

    def test_add_prepends(self):
        """追加した質問は先頭に入る"""
        catalog = QuestionCatalog()

        assert catalog.add("What is entropy?") is True

        assert catalog.questions()[0] == "What is entropy?"
        assert len(catalog.questions()) == len(DEFAULT_QUESTIONS) + 1

    def test_add_duplicate(self):
        """同じ文面の質問は追加しない"""
        catalog = QuestionCatalog()

        assert catalog.add(DEFAULT_QUESTIONS[1]) is False
        assert catalog.questions() == DEFAULT_QUESTIONS

    def test_add_empty(self):
        """空の質問はInvalidInputError"""
        with pytest.raises(InvalidInputError):
            QuestionCatalog().add("  ")

    def test_questions_returns_copy(self):
        """返されたリストを変更しても影響しない"""
        catalog = QuestionCatalog()
        catalog.questions().clear()

        assert catalog.questions() == DEFAULT_QUESTIONS

    def test_persistence(self, tmp_path):
        """生成した質問は保存され、新しい順に読み込まれる"""
        questions_file = tmp_path / "questions.json"
        catalog = QuestionCatalog(questions_file)
        catalog.add("First generated?")
        catalog.add("Second generated?")

        assert json.loads(questions_file.read_text(encoding="utf-8")) == [
            "Second generated?",
            "First generated?",
        ]

        reloaded = QuestionCatalog(questions_file)
        assert reloaded.questions()[:2] == ["Second generated?", "First generated?"]
        assert reloaded.contains(DEFAULT_QUESTIONS[0])

    def test_unreadable_file_falls_back_to_defaults(self, tmp_path):
        """読み込めない質問ファイルは無視して初期の質問を使う"""
        questions_file = tmp_path / "questions.json"
        questions_file.write_bytes(b'["\xff\xfe"]')

        catalog = QuestionCatalog(questions_file)

        assert catalog.questions() == list(DEFAULT_QUESTIONS)
