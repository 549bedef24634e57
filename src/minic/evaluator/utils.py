# src/minic/evaluator/utils.py
import logging

logger = logging.getLogger("minic.evaluator")

SUMMARY_KEYS = ("statements", "expressions", "calls", "builtin_calls", "max_depth", "warnings")


def debug_log(context, detail=None):
    if not logger.isEnabledFor(logging.DEBUG):
        return
    if detail is None:
        logger.debug("%s", context)
    else:
        logger.debug("%s: %s", context, detail)


def new_summary():
    """Fresh evaluation counters for one evaluator."""
    return {key: 0 for key in SUMMARY_KEYS}
