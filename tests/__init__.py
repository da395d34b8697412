"""DebtPath test-suite."""
