"""Fixed statement templates over the business listing schema."""

from __future__ import annotations

from typing import Tuple

from .statements import ParamType, StatementTemplate

_BUSINESSES_IN_ZIP_SQL = (
    "SELECT business.* FROM ("
    "SELECT DISTINCT in_zip.business_id FROM business AS in_zip "
    "JOIN Category ON Category.business_id = in_zip.business_id "
    "WHERE in_zip.zip = :zip{category_filter}"
    ") AS matches "
    "JOIN business ON business.business_id = matches.business_id"
)

ALL_STATES = StatementTemplate(
    name="all_states",
    sql="SELECT DISTINCT business_state FROM business",
)

CITIES_IN_STATE = StatementTemplate(
    name="cities_in_state",
    sql="SELECT DISTINCT city FROM business WHERE business_state = :state",
    params={"state": ParamType.VARCHAR},
)

ZIPS_IN_CITY = StatementTemplate(
    name="zips_in_city",
    sql="SELECT DISTINCT zip FROM business WHERE business_state = :state AND city = :city",
    params={"state": ParamType.VARCHAR, "city": ParamType.VARCHAR},
)

BUSINESSES_IN_ZIP = StatementTemplate(
    name="businesses_in_zip",
    sql=_BUSINESSES_IN_ZIP_SQL.format(category_filter=""),
    params={"zip": ParamType.INTEGER},
)

BUSINESSES_IN_ZIP_WITH_CATEGORIES = StatementTemplate(
    name="businesses_in_zip_with_categories",
    sql=_BUSINESSES_IN_ZIP_SQL.format(
        category_filter=" AND Category.category = ANY(:categories)"
    ),
    params={"zip": ParamType.INTEGER, "categories": ParamType.VARCHAR_ARRAY},
)

INSERT_TIP = StatementTemplate(
    name="insert_tip",
    sql=(
        "INSERT INTO tip (user_id, business_id, date_posted, body) "
        "VALUES (:user, :business, :date, :body)"
    ),
    params={
        "user": ParamType.VARCHAR,
        "business": ParamType.VARCHAR,
        "date": ParamType.TIMESTAMP,
        "body": ParamType.VARCHAR,
    },
)

# Preparation order at startup.
ALL_TEMPLATES: Tuple[StatementTemplate, ...] = (
    ALL_STATES,
    CITIES_IN_STATE,
    ZIPS_IN_CITY,
    BUSINESSES_IN_ZIP,
    BUSINESSES_IN_ZIP_WITH_CATEGORIES,
    INSERT_TIP,
)
