"""SmartWhale: whale tracking, alerts, portfolios and trading signals API."""
