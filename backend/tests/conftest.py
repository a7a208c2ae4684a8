import os
import sys
from pathlib import Path


# Keep tests deterministic and local-only.
os.environ["STUDYMATE_SKIP_DOTENV"] = "1"
os.environ["STUDYMATE_OCR_BACKEND"] = "mock"
os.environ["STUDYMATE_LLM_BACKEND"] = "mock"
os.environ["STUDYMATE_IMAGE_HOST_BACKEND"] = "mock"
os.environ["STUDYMATE_HTTP_TIMEOUT_SECONDS"] = "5"
os.environ["STUDYMATE_PREMIUM_ANSWER_POLICY"] = "append"
os.environ["STUDYMATE_EXPORT_CARDS_PER_PAGE"] = "4"
os.environ["STUDYMATE_PAYMENT_PRICE"] = "149"
os.environ["STUDYMATE_PAYMENT_QR_CODE_URL"] = "https://example.com/qr.png"

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

TEST_DB_PATH = BACKEND_ROOT / "test_studymate.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
if TEST_DB_PATH.exists():
    TEST_DB_PATH.unlink()
