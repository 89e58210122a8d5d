from fx_ghana import FxGhana, Settings

print(FxGhana.__version__)  # 0.1.0

# Default usage: settings come from FX_GHANA_* environment variables
fx = FxGhana()

# Download today's Stanbic rate sheet and store the extracted rates
report = fx.update()
print(report.to_dict())
# => {'trigger': 'manual', 'ran': True, 'fetched': True, 'observations': 1, 'persisted': 1, ...}

# Latest stored USD rate
print(fx.rate())
# => {'id': 12, 'currency': 'USD', 'buying': 10.95, 'selling': 11.05, ...}

# Every stored observation
print(fx.history("USD")[:2])

# Track more rows of the sheet
fx_multi = FxGhana(
    Settings(symbol_table={"United States Dollars": "USD", "Euro": "EUR", "Great Britain Pound": "GBP"})
)
fx_multi.update()

# Serve /getRates, /getRatesFromDB and /performRateUpdate with the hourly timer
# (equivalent to ``fx-ghana serve --port 8080``)
import uvicorn

uvicorn.run(fx.create_app(), host="0.0.0.0", port=8080)
