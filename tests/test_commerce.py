import hashlib
import hmac

import httpx
import pytest
from fastapi import HTTPException

from callingbird.crypto import load_secret, store_secret
from callingbird.domain.commerce import shopify_service
from callingbird.domain.commerce.shopify_service import (
    ShopifyService,
    generate_state,
    normalize_shop_domain,
    parse_state,
    verify_callback_hmac,
)
from callingbird.domain.commerce.woocommerce_service import (
    WooCommerceService,
    clamp_limit,
    normalize_store_url,
)
from callingbird.errors import AmbiguousProductMatchError, NoProductMatchError
from callingbird.models_integrations import ShopifyIntegration

SECRET = "shpss_secret"


class RecordingSync:
    def __init__(self):
        self.requests = []

    async def sync_company(self, company_id):
        self.requests.append(company_id)


@pytest.fixture
def shopify_app(monkeypatch):
    monkeypatch.setattr(shopify_service, "SHOPIFY_CLIENT_ID", "shopify-client")
    monkeypatch.setattr(shopify_service, "SHOPIFY_CLIENT_SECRET", SECRET)
    monkeypatch.setattr(shopify_service, "SHOPIFY_REDIRECT_URI", "https://api.test/shopify/callback")


def signed(params):
    message = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
    return {**params, "hmac": hmac.new(SECRET.encode(), message.encode(), hashlib.sha256).hexdigest()}


def connected_shopify(db, company_id):
    integration = ShopifyIntegration(company_id=company_id, shop_domain="kapsalon.myshopify.com")
    store_secret(integration, "access_token", "shpat_token")
    db.add(integration)
    db.commit()


@pytest.mark.parametrize(
    "raw",
    ["kapsalon", "Kapsalon.myshopify.com", "https://kapsalon.myshopify.com/", " http://KAPSALON "],
)
def test_normalize_shop_domain(raw):
    assert normalize_shop_domain(raw) == "kapsalon.myshopify.com"


def test_empty_shop_domain_is_rejected():
    with pytest.raises(HTTPException) as exc_info:
        normalize_shop_domain("  ")
    assert exc_info.value.status_code == 400


def test_state_round_trips_company_id(shopify_app):
    state = generate_state(3054)
    assert state.startswith("bee.")
    assert parse_state(state) == 3054

    with pytest.raises(HTTPException):
        parse_state("not-hex.nonce")


@pytest.mark.parametrize("forged", ["2a.nonce", "2a.nonce.deadbeef", "", None])
def test_state_without_our_signature_is_rejected(shopify_app, forged):
    with pytest.raises(HTTPException) as exc_info:
        parse_state(forged)
    assert exc_info.value.status_code == 400


def test_state_bound_to_company_cannot_be_rewritten(shopify_app):
    _, nonce, signature = generate_state(7).split(".")

    with pytest.raises(HTTPException):
        parse_state(f"2a.{nonce}.{signature}")


def test_callback_hmac():
    params = signed({"code": "abc", "shop": "kapsalon.myshopify.com", "state": "1.x", "timestamp": "1700000000"})

    assert verify_callback_hmac(params, SECRET)
    assert not verify_callback_hmac({**params, "code": "other"}, SECRET)
    assert not verify_callback_hmac({k: v for k, v in params.items() if k != "hmac"}, SECRET)


def test_auth_url_targets_the_shop(db, shopify_app):
    result = ShopifyService(db).build_auth_url(7, "kapsalon")

    assert result["authUrl"].startswith("https://kapsalon.myshopify.com/admin/oauth/authorize?")
    assert f"state={result['state']}" in result["authUrl"]
    assert parse_state(result["state"]) == 7


async def test_callback_exchanges_code_and_syncs(db, make_company, shopify_app):
    company = make_company()
    sync = RecordingSync()

    def handler(request):
        assert request.url.path == "/admin/oauth/access_token"
        return httpx.Response(200, json={"access_token": "shpat_new", "scope": "read_products,read_orders"})

    service = ShopifyService(db, sync, transport=httpx.MockTransport(handler))
    params = signed({"code": "abc", "shop": "kapsalon.myshopify.com", "state": generate_state(company.id)})

    integration = await service.handle_callback(params)

    assert integration.company_id == company.id
    assert load_secret(integration, "access_token") == "shpat_new"
    assert integration.scopes == "read_products,read_orders"
    assert sync.requests == [company.id]


async def test_callback_with_forged_state_is_rejected(db, make_company, shopify_app):
    victim = make_company()
    sync = RecordingSync()

    def handler(request):
        raise AssertionError("no token exchange for a forged state")

    service = ShopifyService(db, sync, transport=httpx.MockTransport(handler))
    params = signed({"code": "abc", "shop": "attacker.myshopify.com", "state": f"{victim.id:x}.anything"})

    with pytest.raises(HTTPException) as exc_info:
        await service.handle_callback(params)

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Invalid OAuth state"
    assert sync.requests == []
    assert db.query(ShopifyIntegration).count() == 0


async def test_callback_with_bad_signature_is_rejected(db, make_company, shopify_app):
    company = make_company()
    params = signed({"code": "abc", "shop": "kapsalon.myshopify.com", "state": generate_state(company.id)})
    params["code"] = "tampered"

    with pytest.raises(HTTPException) as exc_info:
        await ShopifyService(db, RecordingSync()).handle_callback(params)

    assert exc_info.value.status_code == 400


async def test_shopify_lookup_requires_connection(db, make_company):
    company = make_company()

    with pytest.raises(HTTPException) as exc_info:
        await ShopifyService(db).get_product_by_name(company.id, "Shampoo")

    assert exc_info.value.status_code == 409


async def test_shopify_product_by_name(db, make_company):
    company = make_company()
    connected_shopify(db, company.id)

    def handler(request):
        assert request.headers["X-Shopify-Access-Token"] == "shpat_token"
        assert request.url.params["title"] == "Rode wijn"
        return httpx.Response(200, json={"products": [{"id": 1, "title": "Rode wijn"}, {"id": 2, "title": "Bier"}]})

    service = ShopifyService(db, transport=httpx.MockTransport(handler))

    assert (await service.get_product_by_name(company.id, "Rode wijn"))["id"] == "1"


async def test_shopify_product_lookup_errors(db, make_company):
    company = make_company()
    connected_shopify(db, company.id)
    products = {"products": [{"id": 1, "title": "Shampoo droog haar"}, {"id": 2, "title": "Shampoo vet haar"}]}
    service = ShopifyService(db, transport=httpx.MockTransport(lambda request: httpx.Response(200, json=products)))

    with pytest.raises(AmbiguousProductMatchError):
        await service.get_product_by_name(company.id, "shampoo haar")
    with pytest.raises(NoProductMatchError):
        await service.get_product_by_name(company.id, "fiets")
    with pytest.raises(HTTPException) as exc_info:
        await service.get_product_by_name(company.id, " ")
    assert exc_info.value.status_code == 400


async def test_shopify_order_status(db, make_company):
    company = make_company()
    connected_shopify(db, company.id)

    def handler(request):
        if request.url.path.endswith("/orders/1001.json"):
            return httpx.Response(200, json={"order": {"id": 1001, "financial_status": None, "fulfillment_status": "fulfilled"}})
        return httpx.Response(404, json={"errors": "Not Found"})

    service = ShopifyService(db, transport=httpx.MockTransport(handler))

    assert (await service.get_order_status(company.id, "1001"))["status"] == "fulfilled"
    with pytest.raises(HTTPException) as exc_info:
        await service.get_order_status(company.id, "9999")
    assert exc_info.value.status_code == 404


def test_normalize_store_url_and_limit():
    assert normalize_store_url("shop.example.nl/") == "https://shop.example.nl"
    assert normalize_store_url("HTTP://shop.example.nl") == "HTTP://shop.example.nl"
    assert clamp_limit(0) == 1
    assert clamp_limit(50) == 20
    assert clamp_limit("5") == 5


async def test_woocommerce_connect_requires_keys(db, make_company):
    company = make_company()
    sync = RecordingSync()

    with pytest.raises(HTTPException) as exc_info:
        await WooCommerceService(db, sync).connect(company.id, "shop.example.nl", "ck_1", " ")

    assert exc_info.value.status_code == 400
    assert sync.requests == []


async def test_woocommerce_connect_and_list_products(db, make_company):
    company = make_company()
    sync = RecordingSync()
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"id": 10, "name": "Rode wijn", "price": "12.50", "sku": "RW-1", "short_description": "Droog"},
                {"id": 11, "name": "Bier", "price": "", "sku": "", "short_description": None},
            ],
        )

    service = WooCommerceService(db, sync, transport=httpx.MockTransport(handler))
    integration = await service.connect(company.id, "shop.example.nl", " ck_1 ", "cs_1")

    assert integration.store_url == "https://shop.example.nl"
    assert integration.api_version == "wc/v3"
    assert load_secret(integration, "consumer_key") == "ck_1"
    assert sync.requests == [company.id]

    products = await service.list_products(company.id, limit=100)

    assert seen[0].url.path == "/wp-json/wc/v3/products"
    assert seen[0].url.params["per_page"] == "20"
    assert seen[0].url.params["status"] == "publish"
    assert seen[0].headers["Authorization"].startswith("Basic ")
    assert products[0] == {"id": "10", "name": "Rode wijn", "price": "12.50", "sku": "RW-1", "summary": "Droog"}
    assert products[1]["price"] is None
    assert products[1]["sku"] is None
