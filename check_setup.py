"""
セットアップ確認スクリプト
実行前に必要な依存関係と環境変数が揃っているか確認する
"""
import importlib
import os
import sys
from pathlib import Path

# (インポート名, パッケージ名)
REQUIRED_PACKAGES: list[tuple[str, str]] = [
    ("flet", "flet"),
    ("dotenv", "python-dotenv"),
    ("openai", "openai"),
    ("pydantic", "pydantic"),
    ("numpy", "numpy"),
    ("sounddevice", "sounddevice"),
    ("pydub", "pydub"),
]


def check_imports() -> bool:
    """必要なモジュールのインポートを確認"""
    errors: list[str] = []

    for module_name, package_name in REQUIRED_PACKAGES:
        try:
            importlib.import_module(module_name)
            print(f"✓ {package_name}: OK")
        except ImportError:
            errors.append(f"{package_name} がインストールされていません。pip install {package_name} を実行してください。")
        except OSError as e:
            # sounddeviceはPortAudioが無いとOSErrorになる
            errors.append(f"{package_name} を読み込めません: {e}")

    if errors:
        print("\n❌ 以下の問題が見つかりました:")
        for error in errors:
            print(f"  - {error}")
        return False

    print("\n✓ 全ての依存関係が正しくインストールされています。")
    return True


def check_environment() -> bool:
    """APIキーが設定されているか確認"""
    from dotenv import load_dotenv

    load_dotenv(Path(__file__).parent / ".env")
    if os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_API"):
        print("✓ OPENAI_API_KEY: OK")
        return True
    print("❌ OPENAI_API_KEY が設定されていません（.envファイルまたは環境変数）")
    return False


if __name__ == "__main__":
    print("=== セットアップ確認 ===\n")

    imports_ok = check_imports()
    print()
    env_ok = imports_ok and check_environment()

    print("\n" + "=" * 40)
    if imports_ok and env_ok:
        print("✓ セットアップは完了しています。")
        print("\n実行方法:")
        print("  uv run python main.py")
        sys.exit(0)
    else:
        print("❌ セットアップに問題があります。")
        print("\n依存関係をインストールするには:")
        print("  uv sync")
        sys.exit(1)
