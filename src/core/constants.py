PORTFOLIOS_TABLE = "portfolios"
INVESTMENTS_TABLE = "investments"
VEHICLES_TABLE = "vehicles"
PAST_PRICES_TABLE = "past_prices"

ID_COLUMN = "id"
DATE_TIME_COLUMN = "date_time"
PRICE_COLUMN = "price"
IS_CLOSING_COLUMN = "is_closing"
VEHICLE_ID_COLUMN = "vehicle_id"
SYMBOL_COLUMN = "symbol"
NAME_COLUMN = "name"
PRINCIPAL_COLUMN = "principal"
PORTFOLIO_ID_COLUMN = "portfolio_id"
USD_TO_BASE_CURRENCY_RATE_VEHICLE_ID_COLUMN = "usd_to_base_currency_rate_vehicle_id"

PORTFOLIO_COLUMNS = (USD_TO_BASE_CURRENCY_RATE_VEHICLE_ID_COLUMN,)
INVESTMENT_COLUMNS = (
    DATE_TIME_COLUMN,
    PRINCIPAL_COLUMN,
    VEHICLE_ID_COLUMN,
    PORTFOLIO_ID_COLUMN,
)
VEHICLE_COLUMNS = (SYMBOL_COLUMN, NAME_COLUMN)
PAST_PRICE_COLUMNS = (
    DATE_TIME_COLUMN,
    PRICE_COLUMN,
    IS_CLOSING_COLUMN,
    VEHICLE_ID_COLUMN,
)

# "YYYY-MM-DD hh:mm:00", always UTC
TIMESTAMP_FORMAT = "YYYY-MM-DD HH:mm:ss"
TIMESTAMP_LENGTH = 19

MONEY_MAX_DIGITS = 18
MONEY_DECIMAL_PLACES = 6

# lower bound used when a job prunes "everything before" a cutoff
EPOCH_TIMESTAMP = "1970-01-01 00:00:00"
