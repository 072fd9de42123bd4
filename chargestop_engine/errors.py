# chargestop_engine/errors.py

from __future__ import annotations


class InvalidInput(ValueError):
    """
    Contractfout van de aanroeper (afstand <= 0, batterij buiten 0..100,
    kapotte laadcurve, onbekende strategie).

    Een onhaalbare rit is GEEN InvalidInput: die komt terug als PlanFailure.
    """
