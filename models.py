"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
SQLAlchemy tables backing the relational data store. Column names follow
the database's snake_case convention; rows are translated to domain records
by to_record()/to_domain() so nothing outside the SQL store sees them.
"""

import uuid

from flask_sqlalchemy import SQLAlchemy

from domain import (
    CompanySettings as CompanySettingsRecord,
    MenuItem as MenuItemRecord,
    Role,
    User as UserRecord,
    UserStatus,
    utcnow,
)

db = SQLAlchemy()


def new_id():
    return uuid.uuid4().hex


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), default=Role.WAITER.value)
    status = db.Column(db.String(20), default=UserStatus.ACTIVE.value)

    def to_domain(self):
        return UserRecord(
            id=self.id,
            name=self.name,
            email=self.email,
            role=Role(self.role),
            status=UserStatus(self.status),
        )


class MenuItem(db.Model):
    __tablename__ = "menu_items"
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, default="")
    price = db.Column(db.Numeric(10, 2), nullable=False)
    category = db.Column(db.String(40), nullable=False)
    image_url = db.Column(db.String(500), default="")

    def to_domain(self):
        return MenuItemRecord.from_dict(
            {
                "name": self.name,
                "description": self.description,
                "price": self.price,
                "category": self.category,
                "image": self.image_url,
            },
            item_id=self.id,
        )

    def apply(self, item):
        self.name = item.name
        self.description = item.description
        self.price = item.price
        self.category = item.category.value
        self.image_url = item.image


class Order(db.Model):
    __tablename__ = "orders"
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    table_id = db.Column(db.String(10), nullable=False, index=True)
    customer_name = db.Column(db.String(120), default="")
    items = db.Column(db.JSON, nullable=True)
    total = db.Column(db.Numeric(10, 2), default=0)
    status = db.Column(db.String(20), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    def to_record(self):
        return {
            "id": self.id,
            "table_id": self.table_id,
            "customer_name": self.customer_name,
            "items": self.items,
            "total": self.total,
            "status": self.status,
            "timestamp": self.created_at,
        }


class CompanySettings(db.Model):
    __tablename__ = "company_settings"
    id = db.Column(db.Integer, primary_key=True)
    trade_name = db.Column(db.String(120), default="")
    legal_name = db.Column(db.String(120), default="")
    tax_id = db.Column(db.String(40), default="")
    state_registration = db.Column(db.String(40), default="")
    street = db.Column(db.String(120), default="")
    number = db.Column(db.String(20), default="")
    neighborhood = db.Column(db.String(80), default="")
    city = db.Column(db.String(80), default="")
    state = db.Column(db.String(20), default="")

    def to_domain(self):
        return CompanySettingsRecord.from_dict({c.name: getattr(self, c.name) for c in self.__table__.columns})
