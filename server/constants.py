"""Centralized constants for resources, cache keys and cache lifetimes.

This module provides a single source of truth for the back-office resources
and the cache key layout, so routes never build key strings by hand.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Type

from models.resources import (
    CustomerCreate, CustomerUpdate,
    ExpenseCreate, ExpenseUpdate,
    LeadCreate, LeadUpdate,
    ProductCreate, ProductUpdate,
    RecordCreate, RecordUpdate,
    ReminderCreate, ReminderUpdate,
    SupplierCreate, SupplierUpdate,
)

# =============================================================================
# CACHE TTL TIERS (milliseconds)
# =============================================================================
# Writes through this API invalidate a resource's cached reads, so a tier only
# bounds how long changes made outside the API stay invisible.


class CacheTTL:
    SHORT = 1 * 60 * 1000        # lists
    MEDIUM = 5 * 60 * 1000       # single records
    LONG = 15 * 60 * 1000        # reference records (products, suppliers)
    VERY_LONG = 60 * 60 * 1000   # opt-in for data only ever changed through this API


# =============================================================================
# RESOURCES
# =============================================================================


@dataclass(frozen=True)
class Resource:
    name: str
    table: str
    create_model: Type[RecordCreate]
    update_model: Type[RecordUpdate]
    default_sort: str = "created_at"
    default_order: str = "desc"
    list_ttl_ms: int = CacheTTL.SHORT
    item_ttl_ms: int = CacheTTL.MEDIUM


RESOURCES: Dict[str, Resource] = {
    r.name: r for r in (
        Resource("customers", "customers", CustomerCreate, CustomerUpdate),
        Resource("expenses", "expenses", ExpenseCreate, ExpenseUpdate),
        Resource("leads", "leads", LeadCreate, LeadUpdate),
        Resource("products", "products", ProductCreate, ProductUpdate, item_ttl_ms=CacheTTL.LONG),
        Resource("reminders", "reminders", ReminderCreate, ReminderUpdate,
                 default_sort="due_date", default_order="asc"),
        Resource("suppliers", "suppliers", SupplierCreate, SupplierUpdate, item_ttl_ms=CacheTTL.LONG),
    )
}

SORT_ORDERS = frozenset(["asc", "desc"])

# Filter slot value when a list has no status filter. Filtered lists use
# "status=<value>", which can never equal this.
NO_FILTER = "all"


# =============================================================================
# CACHE KEYS
# =============================================================================
# Lists:  <resource>:<page>:<limit>:<sort_field>:<sort_order>:<filter>
# Items:  <resource>:<uuid>
# Both share the "<resource>:" prefix so one prefix invalidation clears
# every cached read of a resource.


def resource_prefix(resource: str) -> str:
    return f"{resource}:"


def filter_slot(status: Optional[str] = None) -> str:
    return f"status={status}" if status else NO_FILTER


def list_key(resource: str, page: int, limit: int, sort_field: str,
             sort_order: str, status: Optional[str] = None) -> str:
    return f"{resource}:{page}:{limit}:{sort_field}:{sort_order}:{filter_slot(status)}"


def item_key(resource: str, record_id: str) -> str:
    return f"{resource}:{record_id}"
