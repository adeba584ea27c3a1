"""
Integration Models - calendar and commerce connections
Secrets are stored AES-256-GCM encrypted as separate data/iv/tag hex columns
"""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.sql import func

from .database import Base, BigIntId


class GoogleIntegration(Base):
    __tablename__ = "google_integrations"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, unique=True)

    # OAuth tokens (encrypted)
    access_token_data = Column(Text, nullable=False)
    access_token_iv = Column(String(64), nullable=False)
    access_token_tag = Column(String(64), nullable=False)
    refresh_token_data = Column(Text, nullable=True)
    refresh_token_iv = Column(String(64), nullable=True)
    refresh_token_tag = Column(String(64), nullable=True)
    token_expires_at = Column(DateTime, nullable=True)
    scope = Column(Text, nullable=True)
    token_type = Column(String(50), nullable=True)

    # Google user info
    account_email = Column(String(255), nullable=True)
    calendar_id = Column(String(500), default="primary")

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class OutlookIntegration(Base):
    __tablename__ = "outlook_integrations"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, unique=True)

    # OAuth tokens (encrypted)
    access_token_data = Column(Text, nullable=False)
    access_token_iv = Column(String(64), nullable=False)
    access_token_tag = Column(String(64), nullable=False)
    refresh_token_data = Column(Text, nullable=True)
    refresh_token_iv = Column(String(64), nullable=True)
    refresh_token_tag = Column(String(64), nullable=True)
    token_expires_at = Column(DateTime, nullable=True)
    scope = Column(Text, nullable=True)
    token_type = Column(String(50), nullable=True)

    # Microsoft account info
    account_email = Column(String(255), nullable=True)
    calendar_id = Column(String(500), nullable=True)  # None = default calendar

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ShopifyIntegration(Base):
    __tablename__ = "shopify_integrations"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, unique=True)
    shop_domain = Column(String(255), nullable=False)  # example.myshopify.com

    access_token_data = Column(Text, nullable=False)
    access_token_iv = Column(String(64), nullable=False)
    access_token_tag = Column(String(64), nullable=False)
    scopes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class WooCommerceIntegration(Base):
    __tablename__ = "woocommerce_integrations"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, unique=True)
    store_url = Column(String(500), nullable=False)  # https://shop.example.nl

    consumer_key_data = Column(Text, nullable=False)
    consumer_key_iv = Column(String(64), nullable=False)
    consumer_key_tag = Column(String(64), nullable=False)
    consumer_secret_data = Column(Text, nullable=False)
    consumer_secret_iv = Column(String(64), nullable=False)
    consumer_secret_tag = Column(String(64), nullable=False)
    api_version = Column(String(20), default="wc/v3", nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
