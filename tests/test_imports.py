"""
基本的なインポートテスト
すべての主要モジュールが正しくインポートできることを確認する
"""
import importlib

import pytest

MODULES = [
    "answer_evaluator.config",
    "answer_evaluator.constants",
    "answer_evaluator.errors",
    "answer_evaluator.models.schemas",
    "answer_evaluator.services.audio_codec",
    "answer_evaluator.services.audio_format",
    "answer_evaluator.services.audio_service",
    "answer_evaluator.services.request_builder",
    "answer_evaluator.services.response_validator",
    "answer_evaluator.services.openai_service",
    "answer_evaluator.services.storage_service",
    "answer_evaluator.services.question_service",
    "answer_evaluator.services.evaluation_service",
    "answer_evaluator.services.api_check_service",
    # GUIモジュール（Fletが必要）
    "answer_evaluator.gui.evaluator_window",
]


@pytest.mark.parametrize("module_name", MODULES)
def test_import(module_name):
    """モジュールがインポートできること"""
    assert importlib.import_module(module_name) is not None
