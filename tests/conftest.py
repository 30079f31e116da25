"""Shared fixtures: in-memory database, mocked upstream APIs and a test client."""
import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from smartwhale.db.sessions import get_db
from smartwhale.deps import get_optional_user
from smartwhale.main import create_app
from smartwhale.providers import (AlchemyProvider, CoinGeckoProvider,
                                  EtherscanProvider, SendGridProvider,
                                  StripeProvider, SupabaseAuthProvider)
from smartwhale.schemas import AuthUser
from smartwhale.services import (AccountService, ActivityService, AlertChecker,
                                 BillingService, EmailService, MarketService,
                                 PortfolioService, SignalService,
                                 WatchlistService, WhaleService,
                                 WhaleSyncService)

WEBHOOK_SECRET = "whsec_test"

# CoinGecko id -> USD price served by the mocked /simple/price endpoint.
COINGECKO_PRICES = {
    "bitcoin": 100_000.0,
    "ethereum": 3_000.0,
    "solana": 150.0,
    "binancecoin": 600.0,
    "cardano": 0.5,
    "tether": 1.0,
}

_ENV_VARS = (
    "ETHERSCAN_API_KEY",
    "ALCHEMY_HTTP_URL",
    "COINGECKO_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "SENDGRID_API_KEY",
    "CRON_SECRET",
    "ALERT_COOLDOWN_MINUTES",
    "APP_URL",
)


def market_row(coin_id: str, symbol: str, price: float, change_24h: float, **extra) -> dict:
    """One /coins/markets row."""
    row = {
        "id": coin_id,
        "symbol": symbol,
        "name": coin_id.title(),
        "current_price": price,
        "market_cap": price * 1_000_000,
        "total_volume": price * 20_000,
        "high_24h": price * 1.05,
        "low_24h": price * 0.95,
        "price_change_percentage_24h": change_24h,
        "price_change_percentage_7d_in_currency": change_24h * 2,
    }
    row.update(extra)
    return row


MARKET_ROWS = [
    # Oversold near the 24h low: STRONG_BUY.
    market_row("bitcoin", "btc", 100_000.0, -8.0, high_24h=120_000.0, low_24h=99_000.0,
               price_change_percentage_7d_in_currency=-84.0),
    # Overbought near the 24h high: STRONG_SELL.
    market_row("ethereum", "eth", 3_000.0, 8.0, high_24h=3_010.0, low_24h=2_500.0,
               price_change_percentage_7d_in_currency=84.0),
    market_row("tether", "usdt", 1.0, 0.01),
    # Flat mid-range: HOLD.
    market_row("solana", "sol", 150.0, 0.0),
    market_row("cardano", "ada", 0.5, 1.0, current_price=None),
]


def coingecko_handler(request: httpx.Request) -> httpx.Response:
    """Serve /simple/price and /coins/markets; anything else is a 404."""
    if request.url.path.endswith("/coins/markets"):
        return httpx.Response(200, json=MARKET_ROWS)
    if request.url.path.endswith("/simple/price"):
        ids = request.url.params.get("ids", "").split(",")
        return httpx.Response(
            200,
            json={
                cid: {
                    "usd": COINGECKO_PRICES[cid],
                    "usd_24h_change": 1.5,
                    "usd_market_cap": COINGECKO_PRICES[cid] * 1_000_000,
                    "usd_24h_vol": COINGECKO_PRICES[cid] * 10_000,
                    "last_updated_at": 1_700_000_000,
                }
                for cid in ids
                if cid in COINGECKO_PRICES
            },
        )
    return httpx.Response(404, json={"error": "not found"})


def make_coingecko(handler=coingecko_handler) -> CoinGeckoProvider:
    client = httpx.AsyncClient(
        base_url=CoinGeckoProvider.BASE_URL, transport=httpx.MockTransport(handler)
    )
    return CoinGeckoProvider(client=client)


def unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every test without credentials from the developer's environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def market() -> MarketService:
    return MarketService(make_coingecko())


@pytest.fixture
def user() -> AuthUser:
    return AuthUser(id="user-1", email="alice@example.com")


@pytest.fixture
def auth(user):
    """Mutable caller identity; set auth["user"] = None to act anonymously."""
    return {"user": user}


@pytest.fixture
def app(engine, market, auth):
    """App wired like the lifespan does, with every upstream API mocked or unconfigured."""
    app = create_app()
    mock = httpx.MockTransport(unreachable)
    etherscan = EtherscanProvider(client=httpx.AsyncClient(transport=mock))
    alchemy = AlchemyProvider(client=httpx.AsyncClient(transport=mock))
    supabase = SupabaseAuthProvider(client=httpx.AsyncClient(transport=mock))
    stripe = StripeProvider(
        secret_key="sk_test",
        webhook_secret=WEBHOOK_SECRET,
        client=httpx.AsyncClient(transport=mock),
    )
    sendgrid = SendGridProvider(client=httpx.AsyncClient(transport=mock))
    email = EmailService(sendgrid)
    activity = ActivityService(etherscan, market)

    app.state.supabase = supabase
    app.state.market_service = market
    app.state.activity_service = activity
    app.state.email_service = email
    app.state.whale_service = WhaleService(etherscan, market)
    app.state.signal_service = SignalService(market.provider, market, whale_flow=activity)
    app.state.portfolio_service = PortfolioService(market)
    app.state.watchlist_service = WatchlistService(etherscan, market)
    app.state.alert_checker = AlertChecker(etherscan, market, email)
    app.state.sync_service = WhaleSyncService(alchemy, market)
    app.state.account_service = AccountService(supabase, email)
    app.state.billing_service = BillingService(stripe)

    def override_get_db():
        with Session(engine) as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_optional_user] = lambda: auth["user"]
    return app


@pytest.fixture
def client(app):
    """TestClient without the lifespan (services are set by the app fixture)."""
    return TestClient(app)
