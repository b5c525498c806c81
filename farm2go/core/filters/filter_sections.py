"""Filter section catalog.

Each screen renders a sidebar of filter sections. The builders below return
the sections for a screen with option counts computed from the records the
screen currently holds. The keys of the sections are the keys the pipeline
receives in its FilterState.
"""

# pylint: disable=missing-class-docstring
from __future__ import annotations

from typing import Any, Callable, Iterable, Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field

from farm2go.core.filters.fields import read_field

SectionType = Literal["category", "range", "toggle", "sort"]

PRODUCT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("vegetables", "Vegetables"),
    ("fruits", "Fruits"),
    ("grains", "Grains"),
    ("herbs", "Herbs"),
)

DATE_RANGE_LABELS: dict[str, str] = {
    "all": "All Time",
    "today": "Today",
    "week": "This Week",
    "month": "This Month",
    "quarter": "This Quarter",
    "year": "This Year",
}


class FilterOption(BaseModel):
    key: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    count: int | None = Field(default=None, ge=0)
    min: float | None = None
    max: float | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class FilterSection(BaseModel):
    key: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    type: SectionType
    options: list[FilterOption]

    model_config = ConfigDict(extra="forbid", frozen=True)

    def option(self, key: str) -> FilterOption | None:
        for opt in self.options:
            if opt.key == key:
                return opt
        return None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _count(records: Sequence[Any], predicate: Callable[[Any], bool]) -> int:
    return sum(1 for record in records if predicate(record))


def _field_equals(key: str, wanted: str, *, casefold: bool = False) -> Callable[[Any], bool]:
    def predicate(record: Any) -> bool:
        value = read_field(record, key)
        if value is None:
            return False
        if casefold:
            return str(value).casefold() == wanted.casefold()
        return value == wanted

    return predicate


def _category_section(
    records: Sequence[Any],
    *,
    field: str,
    title: str,
    all_label: str,
) -> FilterSection:
    options = [FilterOption(key="all", label=all_label, count=len(records))]
    for key, label in PRODUCT_CATEGORIES:
        options.append(
            FilterOption(
                key=key,
                label=label,
                count=_count(records, _field_equals(field, key, casefold=True)),
            )
        )
    return FilterSection(key="category", title=title, type="category", options=options)


def _range_section(
    key: str,
    title: str,
    all_label: str,
    bands: Iterable[tuple[str, str, float, float]],
    upper: float,
) -> FilterSection:
    options = [FilterOption(key="all", label=all_label, min=0, max=upper)]
    options.extend(
        FilterOption(key=band_key, label=label, min=lo, max=hi)
        for band_key, label, lo, hi in bands
    )
    return FilterSection(key=key, title=title, type="range", options=options)


def _date_section(key: str, title: str, range_ids: Iterable[str]) -> FilterSection:
    return FilterSection(
        key=key,
        title=title,
        type="range",
        options=[FilterOption(key=rid, label=DATE_RANGE_LABELS[rid]) for rid in range_ids],
    )


def _sort_section(options: Iterable[tuple[str, str]]) -> FilterSection:
    return FilterSection(
        key="sortBy",
        title="Sort By",
        type="sort",
        options=[FilterOption(key=k, label=label) for k, label in options],
    )


def _toggle_section(key: str, title: str, options: Iterable[tuple[str, str]]) -> FilterSection:
    return FilterSection(
        key=key,
        title=title,
        type="toggle",
        options=[FilterOption(key=k, label=label) for k, label in options],
    )


# ---------------------------------------------------------------------------
# Screen catalogs
# ---------------------------------------------------------------------------


def marketplace_filters(products: Sequence[Any]) -> list[FilterSection]:
    """Buyer marketplace: products by category, price, stock."""
    return [
        _category_section(products, field="category", title="Categories", all_label="All"),
        _range_section(
            "priceRange",
            "Price Range",
            "All Prices",
            [
                ("low", "₱0 - ₱50", 0, 50),
                ("medium", "₱50 - ₱100", 50, 100),
                ("high", "₱100 - ₱500", 100, 500),
                ("premium", "₱500+", 500, 10000),
            ],
            upper=10000,
        ),
        _toggle_section("availability", "Availability", [("inStock", "In Stock Only")]),
        _sort_section(
            [
                ("newest", "Newest First"),
                ("price-low", "Price: Low to High"),
                ("price-high", "Price: High to Low"),
                ("name", "Name A-Z"),
                ("popular", "Most Popular"),
            ]
        ),
    ]


def purchase_history_filters(orders: Sequence[Any]) -> list[FilterSection]:
    """Buyer purchase history: orders joined with their product."""
    return [
        _category_section(
            orders, field="product.category", title="Categories", all_label="All"
        ),
        _range_section(
            "amountRange",
            "Amount Range",
            "All Amounts",
            [
                ("low", "₱0 - ₱500", 0, 500),
                ("medium", "₱500 - ₱1,500", 500, 1500),
                ("high", "₱1,500 - ₱3,000", 1500, 3000),
                ("premium", "₱3,000+", 3000, 10000),
            ],
            upper=10000,
        ),
        _date_section("dateRange", "Date Range", ["all", "week", "month", "quarter", "year"]),
        _sort_section(
            [
                ("newest", "Newest First"),
                ("oldest", "Oldest First"),
                ("amount-high", "Amount: High to Low"),
                ("amount-low", "Amount: Low to High"),
                ("status", "Status"),
            ]
        ),
    ]


def farmer_orders_filters(orders: Sequence[Any]) -> list[FilterSection]:
    """Farmer order queue: orders by lifecycle and payment status."""
    status_options = [FilterOption(key="all", label="All Orders", count=len(orders))]
    for status, label in (
        ("pending", "Pending"),
        ("confirmed", "Confirmed"),
        ("processing", "Processing"),
        ("ready", "Ready"),
        ("delivered", "Delivered"),
        ("cancelled", "Cancelled"),
    ):
        status_options.append(
            FilterOption(key=status, label=label, count=_count(orders, _field_equals("status", status)))
        )

    payment_options = [FilterOption(key="all", label="All Payments", count=len(orders))]
    for status, label in (
        ("pending", "Payment Pending"),
        ("completed", "Paid"),
        ("failed", "Payment Failed"),
    ):
        payment_options.append(
            FilterOption(
                key=status,
                label=label,
                count=_count(orders, _field_equals("transaction.status", status)),
            )
        )

    return [
        FilterSection(key="status", title="Order Status", type="category", options=status_options),
        FilterSection(
            key="paymentStatus", title="Payment Status", type="category", options=payment_options
        ),
        _range_section(
            "amountRange",
            "Order Value",
            "All Amounts",
            [
                ("low", "₱0 - ₱500", 0, 500),
                ("medium", "₱500 - ₱1,500", 500, 1500),
                ("high", "₱1,500 - ₱3,000", 1500, 3000),
                ("premium", "₱3,000+", 3000, 10000),
            ],
            upper=10000,
        ),
        _date_section("dateRange", "Date Range", ["all", "today", "week", "month", "quarter"]),
        _toggle_section("urgentOnly", "Priority Orders", [("urgent", "Urgent Orders Only")]),
        _sort_section(
            [
                ("newest", "Newest First"),
                ("oldest", "Oldest First"),
                ("amount-high", "Highest Value"),
                ("amount-low", "Lowest Value"),
                ("status", "By Status"),
            ]
        ),
    ]


def farmer_sales_filters(sales: Sequence[Any]) -> list[FilterSection]:
    """Farmer sales history: completed sales joined with their product."""
    return [
        _category_section(
            sales, field="product.category", title="Product Categories", all_label="All Products"
        ),
        _range_section(
            "revenueRange",
            "Revenue Range",
            "All Revenue",
            [
                ("low", "₱0 - ₱500", 0, 500),
                ("medium", "₱500 - ₱1,500", 500, 1500),
                ("high", "₱1,500 - ₱3,000", 1500, 3000),
                ("premium", "₱3,000+", 3000, 10000),
            ],
            upper=10000,
        ),
        _date_section("period", "Time Period", ["all", "today", "week", "month", "quarter", "year"]),
        _toggle_section(
            "performance",
            "Performance",
            [("topSelling", "Top Selling Products"), ("repeatCustomers", "Repeat Customers Only")],
        ),
        _sort_section(
            [
                ("revenue-high", "Highest Revenue"),
                ("revenue-low", "Lowest Revenue"),
                ("quantity-high", "Most Sold"),
                ("quantity-low", "Least Sold"),
                ("newest", "Recent Sales"),
            ]
        ),
    ]


def admin_users_filters(users: Sequence[Any]) -> list[FilterSection]:
    """Admin user directory."""

    def verified(user: Any) -> bool:
        return bool(read_field(user, "verified", False))

    def submitted(user: Any) -> bool:
        return bool(read_field(user, "verification_submitted", False))

    user_type_options = [FilterOption(key="all", label="All Users", count=len(users))]
    for user_type, label in (("farmer", "Farmers"), ("buyer", "Buyers"), ("admin", "Admins")):
        user_type_options.append(
            FilterOption(
                key=user_type,
                label=label,
                count=_count(users, _field_equals("user_type", user_type)),
            )
        )

    verification_options = [
        FilterOption(key="all", label="All Status", count=len(users)),
        FilterOption(key="verified", label="Verified", count=_count(users, verified)),
        FilterOption(
            key="pending",
            label="Pending",
            count=_count(users, lambda u: not verified(u) and submitted(u)),
        ),
        FilterOption(
            key="unverified",
            label="Unverified",
            count=_count(users, lambda u: not verified(u) and not submitted(u)),
        ),
    ]

    return [
        FilterSection(key="userType", title="User Type", type="category", options=user_type_options),
        FilterSection(
            key="verificationStatus",
            title="Verification",
            type="category",
            options=verification_options,
        ),
        _toggle_section(
            "activity",
            "Activity",
            [("activeOnly", "Active Users Only"), ("recentActivity", "Recent Activity (30 days)")],
        ),
        _sort_section(
            [
                ("newest", "Newest First"),
                ("oldest", "Oldest First"),
                ("name", "Name A-Z"),
            ]
        ),
    ]


SECTION_BUILDERS: dict[str, Callable[[Sequence[Any]], list[FilterSection]]] = {
    "marketplace": marketplace_filters,
    "purchase-history": purchase_history_filters,
    "farmer-orders": farmer_orders_filters,
    "farmer-sales": farmer_sales_filters,
    "admin-users": admin_users_filters,
}
