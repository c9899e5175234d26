import logging

from infrastructure.observability import get_log_context, log_step, set_log_context
from infrastructure.observability.logging import ContextInjectFilter
from infrastructure.utils import derive_seed


def test_derive_seed_is_stable_and_label_specific() -> None:
    assert derive_seed(42, "bootstrap") == derive_seed(42, "bootstrap")
    assert derive_seed(42, "bootstrap") != derive_seed(42, "cross_validation")
    assert derive_seed(42, "bootstrap") != derive_seed(43, "bootstrap")
    assert 0 <= derive_seed(0, "split") < 2**31


def test_log_step_tags_records_and_restores_previous_step() -> None:
    set_log_context(run_id_full="run-1", step="-")
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)

    with log_step("delong"):
        ContextInjectFilter().filter(record)
        assert get_log_context()["step"] == "delong"

    assert record.step == "delong"
    assert record.run == get_log_context()["run_tag"]
    assert get_log_context()["step"] == "-"
