import os

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///markups.sqlite")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    API_KEY = os.getenv("API_KEY")

    # Markup knobs (easy to tune)
    MARKUP_FALLBACK_MULTIPLIER = float(os.getenv("MARKUP_FALLBACK_MULTIPLIER", "1.25"))
    MARKUP_RECALC_DELAY = float(os.getenv("MARKUP_RECALC_DELAY", "1.0"))  # seconds after session start
    DEFAULT_MONTHLY_HOURS = float(os.getenv("DEFAULT_MONTHLY_HOURS", "173.2"))
    DEFAULT_PERIOD = "12"

    # Sales charge name -> category (can be overridden or extended)
    CHARGE_CATEGORIES = {
        "ICMS": "taxes",
        "ISS": "taxes",
        "PIS/COFINS": "taxes",
        "IRPJ/CSLL": "taxes",
        "IPI": "taxes",
        "Cartão de débito": "payment_fees",
        "Cartão de crédito": "payment_fees",
        "Boleto bancário": "payment_fees",
        "PIX": "payment_fees",
        "Gateway de pagamento": "payment_fees",
        "Marketing": "commissions",
        "Aplicativo de delivery": "commissions",
        "Plataforma SaaS": "commissions",
        "Colaboradores (comissão)": "commissions",
    }


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    API_KEY = "test-key"
    MARKUP_RECALC_DELAY = 0.0
