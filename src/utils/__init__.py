"""
Utils package.

- All dates are calendar dates (``datetime.date``), day precision.
- Month keys are ``YYYY-MM`` strings.
- Helpers here are pure and hold no module-level mutable state.
"""
