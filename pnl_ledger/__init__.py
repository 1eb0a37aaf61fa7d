"""Cost-basis PnL ledger: lot tracking, replay and position projection."""
