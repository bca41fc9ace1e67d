import logging

from transfer_ocr.ocr.text_utils import split_lines
from transfer_ocr.persistence.mappings import InMemoryAccountMappings
from transfer_ocr.pipeline.reconstruct import (
    ReconstructionContext,
    reconstruct_bank_account,
    reconstruct_dana_account,
)
from transfer_ocr.validations.patterns import SuffixCorrectionTable


def _ctx(text, **kw):
    return ReconstructionContext(text=text, lines=split_lines(text), **kw)


def test_full_text_masked_shape_wins_first():
    r = reconstruct_bank_account(_ctx("Rekening xxxxxxxxxx 1234\nBANK BRI 504"))
    assert r.step == "full_text_masked_shape"
    assert r.account == "***********1234"


def test_bank_line_suffix_uses_correction_table():
    r = reconstruct_bank_account(_ctx("Ke Siti Aminah\nTujuan BRI 504"))
    assert r.step == "bank_line_suffix"
    assert r.account == "***********8504"
    assert r.bank == "BRI"
    assert r.meta["read"] == "504"


def test_bank_line_suffix_skips_seabank_lines():
    r = reconstruct_bank_account(_ctx("SeaBank 9012\n"))
    assert r.step == "placeholder"


def test_bank_line_suffix_custom_table():
    table = SuffixCorrectionTable(version="t", table={})
    r = reconstruct_bank_account(_ctx("Tujuan BRI 504", corrections=table))
    assert r.account == "***********504"


def test_mapping_lookup_by_receiver_name():
    mappings = InMemoryAccountMappings({"Siti Aminah": "***********7788"})
    r = reconstruct_bank_account(_ctx("BANK BRI", receiver_name="siti  aminah", mappings=mappings))
    assert r.step == "mapping_lookup"
    assert r.account == "***********7788"


def test_bank_placeholder_when_nothing_matches(caplog):
    with caplog.at_level(logging.DEBUG, logger="transfer_ocr.pipeline.reconstruct"):
        r = reconstruct_bank_account(_ctx("BANK BRI", receiver_name="SITI", mappings=InMemoryAccountMappings()))
    assert r.account == "***********"
    assert r.step == "placeholder"
    assert any(rec.getMessage() == "reconstruct_step_miss" for rec in caplog.records)
    assert any(rec.getMessage() == "reconstruct_step_hit" for rec in caplog.records)


def test_dana_crop_rescan_first():
    calls = []

    def reader():
        calls.append(1)
        return "0812337"

    r = reconstruct_dana_account(_ctx("Dana: ???", dana_reader=reader))
    assert r.step == "dana_crop_rescan"
    assert r.account == "0812****337"
    assert calls == [1]


def test_dana_text_search_after_empty_rescan():
    r = reconstruct_dana_account(_ctx("Ke Diah\nDana 0813xx5512", dana_reader=lambda: ""))
    assert r.step == "dana_text_search"
    assert r.account == "0813****512"


def test_dana_placeholder():
    r = reconstruct_dana_account(_ctx("No. Transaksi 20250724435044619659"))
    assert r.account == "0000*****000"
    assert r.step == "placeholder"


def test_mapping_with_unmasked_account_falls_through_to_placeholder():
    class RawStore:
        def lookup(self, name):
            return "12345"

    r = reconstruct_bank_account(_ctx("BANK BRI", receiver_name="SITI AMINAH", mappings=RawStore()))
    assert r.step == "placeholder"
    assert r.account == "***********"
