import threading

import numpy as np
import pytest
import pytesseract

from transfer_ocr.config import RecognizerSettings
from transfer_ocr.ocr import ocr_engine
from transfer_ocr.ocr.ocr_engine import (
    PaddleOCREngine,
    Recognition,
    Recognizer,
    RecognizerError,
    TesseractEngine,
)


def _poly(x=0, y=0, w=10, h=10):
    return [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]


def _blank(w=100, h=60):
    return np.full((h, w), 255, dtype=np.uint8)


def _tess_data(words):
    """Build an image_to_data style dict from (text, conf, block, par, line, left, top) tuples."""
    keys = ["text", "conf", "block_num", "par_num", "line_num", "left", "top", "width", "height"]
    data = {k: [] for k in keys}
    for text, conf, block, par, line, left, top in words:
        data["text"].append(text)
        data["conf"].append(conf)
        data["block_num"].append(block)
        data["par_num"].append(par)
        data["line_num"].append(line)
        data["left"].append(left)
        data["top"].append(top)
        data["width"].append(20)
        data["height"].append(10)
    return data


def test_tesseract_groups_words_into_lines(monkeypatch):
    captured = {}

    def fake_image_to_data(image, lang=None, config=None, output_type=None):
        captured["lang"] = lang
        captured["config"] = config
        return _tess_data(
            [
                ("", -1, 1, 1, 0, 0, 0),
                ("Jumlah", 91, 1, 1, 1, 10, 10),
                ("Transfer", 89, 1, 1, 1, 40, 10),
                ("Rp", 95, 1, 1, 2, 10, 30),
                ("260.000", 93, 1, 1, 2, 40, 30),
            ]
        )

    monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)
    eng = TesseractEngine(RecognizerSettings(lang="ind+eng", psm=6, oem=1))
    rec = eng.recognize(_blank(), whitelist="0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz.")

    assert rec.text == "Jumlah Transfer\nRp 260.000"
    assert len(rec.lines) == 2
    assert rec.lines[0].engine == "tesseract"
    assert rec.lines[1].bbox[0] == (10.0, 30.0)
    assert 0.9 <= rec.confidence <= 0.95
    assert captured["lang"] == "ind+eng"
    assert "--psm 6" in captured["config"]
    assert "tessedit_char_whitelist=" in captured["config"]


def test_tesseract_single_line_mode_and_whitelist_filter(monkeypatch):
    captured = {}

    def fake_image_to_data(image, lang=None, config=None, output_type=None):
        captured["config"] = config
        return _tess_data([("0812****337!", 80, 1, 1, 1, 0, 0)])

    monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)
    rec = TesseractEngine(RecognizerSettings()).recognize(_blank(), whitelist="0123456789*", single_line=True)
    assert "--psm 7" in captured["config"]
    assert rec.text == "0812****337"


def test_tesseract_min_confidence_drops_words(monkeypatch):
    monkeypatch.setattr(
        pytesseract,
        "image_to_data",
        lambda *a, **k: _tess_data([("noise", 20, 1, 1, 1, 0, 0), ("BCA", 90, 1, 1, 2, 0, 20)]),
    )
    rec = TesseractEngine(RecognizerSettings(min_confidence=0.5)).recognize(_blank())
    assert rec.text == "BCA"


def test_tesseract_missing_binary_maps_to_recognizer_error(monkeypatch):
    def boom(*a, **k):
        raise pytesseract.TesseractNotFoundError()

    monkeypatch.setattr(pytesseract, "image_to_data", boom)
    with pytest.raises(RecognizerError) as excinfo:
        TesseractEngine(RecognizerSettings()).recognize(_blank())
    assert excinfo.value.code == "RECOGNIZER_UNAVAILABLE"


def test_empty_image_returns_empty_recognition():
    rec = TesseractEngine(RecognizerSettings()).recognize(np.zeros((0, 0), dtype=np.uint8))
    assert rec.text == ""
    assert rec.lines == []


class _StubPaddle:
    def __init__(self, *args, **kwargs):
        pass


@pytest.fixture
def paddle_available(monkeypatch):
    monkeypatch.setattr(ocr_engine, "PaddleOCR", _StubPaddle)


def test_paddle_parse_results_new_format_filters_and_sorts(paddle_available):
    eng = PaddleOCREngine(RecognizerSettings(min_confidence=0.3))
    results = [
        {
            "rec_texts": ["Rp 300.000", "low", "Total Transaksi"],
            "rec_scores": [0.95, 0.1, 0.9],
            "rec_polys": [_poly(0, 40), _poly(0, 80), _poly(0, 0)],
        }
    ]
    lines = eng._parse_results(results, None)
    assert [l.text for l in lines] == ["Total Transaksi", "Rp 300.000"]
    assert all(l.engine == "paddle" for l in lines)


def test_paddle_parse_results_legacy_format_with_whitelist(paddle_available):
    eng = PaddleOCREngine(RecognizerSettings())
    results = [[(_poly(), ("0812-337", 0.9))]]
    lines = eng._parse_results(results, "0123456789*")
    assert lines[0].text == "0812337"
    assert lines[0].raw_text == "0812-337"


def test_paddle_recognize_uses_cached_model(paddle_available, monkeypatch):
    calls = []

    class Model:
        def ocr(self, img):
            calls.append(img.shape)
            return [[(_poly(), ("BNI", 0.99))]]

    eng = PaddleOCREngine(RecognizerSettings())
    monkeypatch.setattr(PaddleOCREngine, "_get_engine", lambda self: Model())
    rec = eng.recognize(_blank())
    assert rec.text == "BNI"
    # gray input is expanded to 3 channels for the model
    assert calls[0][-1] == 3


def test_paddle_missing_dependency_raises_import_error(monkeypatch):
    monkeypatch.setattr(ocr_engine, "PaddleOCR", None)
    with pytest.raises(ImportError):
        PaddleOCREngine(RecognizerSettings())


class _CountingEngine:
    name = "stub"

    def __init__(self, thread_safe):
        self.thread_safe = thread_safe
        self.calls = []

    def recognize(self, image, *, whitelist=None, single_line=False):
        self.calls.append((whitelist, single_line))
        return Recognition(text="ok")


def test_recognizer_facade_passes_whitelists():
    stub = _CountingEngine(thread_safe=True)
    rec = Recognizer(RecognizerSettings(char_whitelist="ABC"), engine=stub)
    rec.recognize(_blank())
    rec.recognize_line(_blank())
    assert stub.calls[0] == ("ABC", False)
    assert stub.calls[1] == ("0123456789*", True)
    assert rec.engine_name == "stub"


def test_recognizer_serializes_line_calls_for_unsafe_engines():
    active = []
    peak = []
    lock = threading.Lock()

    class Slow(_CountingEngine):
        def recognize(self, image, *, whitelist=None, single_line=False):
            with lock:
                active.append(1)
                peak.append(len(active))
            threading.Event().wait(0.02)
            with lock:
                active.pop()
            return Recognition(text="x")

    rec = Recognizer(RecognizerSettings(), engine=Slow(thread_safe=False))
    threads = [threading.Thread(target=rec.recognize_line, args=(_blank(),)) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert max(peak) == 1


def test_recognizer_selects_engine_from_settings(paddle_available):
    assert Recognizer(RecognizerSettings(engine="tesseract")).engine_name == "tesseract"
    assert Recognizer(RecognizerSettings(engine="paddle")).engine_name == "paddle"
    # unknown names fall back to tesseract
    assert Recognizer(RecognizerSettings(engine="nope")).engine_name == "tesseract"
