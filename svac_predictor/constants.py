from __future__ import annotations

# SVAC column configuration
SVAC_COLUMNS = {
    "conflict": "conflictid",
    "actor": "actorid",
    "year": "year",
    "location": "gwnoloc",
    "form": "form",
}

PREVALENCE_COLUMNS = [
    "state_prev",
    "ai_prev",
    "hrw_prev",
]

MISSING_SENTINEL = -99

# Violence-type codes in the SVAC "form" field
FORM_CODES = {
    1: "rape",
    2: "sexual_slavery",
    3: "forced_prostitution",
    4: "forced_pregnancy",
    5: "forced_sterilization_or_abortion",
    6: "sexual_mutilation",
    7: "sexual_torture",
}

MAX_FORM_CODES = 5
SEXUAL_SLAVERY_CODE = 2
# Only the leading positions of the form list are checked for sexual slavery
SEXUAL_SLAVERY_POSITIONS = 2


COUNTRY_ID = "gwno"
ACTOR_ID = "actorid"
REGRESSION_TARGET = "avg_prev"
CLASSIFICATION_TARGET = "has_sexslv"

ID_COLUMNS = ["country_name", "country_code", COUNTRY_ID]


# World Bank DataBank export layout
WDI_COLUMNS = {
    "country_name": "Country Name",
    "country_code": "Country Code",
    "indicator": ("Series Name", "Indicator Name"),
}

WDI_MISSING_TOKEN = ".."
REFERENCE_YEAR = 2015
MISSING_THRESHOLD = 0.40


# Codes the ISO -> Gleditsch-Ward crosswalk cannot resolve on its own.
# Yemen: the GW list keeps the unified state under the Yemen Arab Republic code.
COUNTRY_ID_OVERRIDES = {
    "YEM": 678,
}


# WDI series name -> semantic column name
INDICATOR_NAMES = {
    "Population, total": "population",
    "Population growth (annual %)": "population_growth",
    "Surface area (sq. km)": "surface_area",
    "Population density (people per sq. km of land area)": "population_density",
    "Poverty headcount ratio at national poverty lines (% of population)": "poverty_headcount",
    "Poverty headcount ratio at $2.15 a day (2017 PPP) (% of population)": "extreme_poverty",
    "GNI, Atlas method (current US$)": "gni_atlas",
    "GNI per capita, Atlas method (current US$)": "gni_per_capita_atlas",
    "GNI, PPP (current international $)": "gni_ppp",
    "GNI per capita, PPP (current international $)": "gni_per_capita_ppp",
    "Income share held by lowest 20%": "income_share_lowest20",
    "Life expectancy at birth, total (years)": "life_expectancy",
    "Fertility rate, total (births per woman)": "fertility_rate",
    "Adolescent fertility rate (births per 1,000 women ages 15-19)": "adolescent_fertility",
    "Contraceptive prevalence, any method (% of married women ages 15-49)": "contraceptive_prevalence",
    "Births attended by skilled health staff (% of total)": "skilled_births",
    "Mortality rate, under-5 (per 1,000 live births)": "under5_mortality",
    "Prevalence of underweight, weight for age (% of children under 5)": "underweight_prevalence",
    "Immunization, measles (% of children ages 12-23 months)": "measles_immunization",
    "Primary completion rate, total (% of relevant age group)": "primary_completion",
    "School enrollment, primary (% gross)": "primary_enrollment",
    "School enrollment, secondary (% gross)": "secondary_enrollment",
    "School enrollment, primary and secondary (gross), gender parity index (GPI)": "enrollment_gender_parity",
    "Prevalence of HIV, total (% of population ages 15-49)": "hiv_prevalence",
    "Forest area (sq. km)": "forest_area",
    "Annual freshwater withdrawals, total (% of internal resources)": "freshwater_withdrawals",
    "Energy use (kg of oil equivalent per capita)": "energy_use",
    "CO2 emissions (metric tons per capita)": "co2_per_capita",
    "Electric power consumption (kWh per capita)": "electric_power",
    "Access to electricity (% of population)": "electricity_access",
    "GDP (current US$)": "gdp",
    "GDP growth (annual %)": "gdp_growth",
    "Inflation, GDP deflator (annual %)": "gdp_deflator_inflation",
    "Agriculture, forestry, and fishing, value added (% of GDP)": "agriculture_share",
    "Industry (including construction), value added (% of GDP)": "industry_share",
    "Exports of goods and services (% of GDP)": "exports_share",
    "Imports of goods and services (% of GDP)": "imports_share",
    "Gross capital formation (% of GDP)": "capital_formation_share",
    "Revenue, excluding grants (% of GDP)": "revenue_share",
    "Start-up procedures to register a business (number)": "business_procedures",
    "Market capitalization of listed domestic companies (% of GDP)": "market_capitalization",
    "Military expenditure (% of GDP)": "military_share",
    "Mobile cellular subscriptions (per 100 people)": "mobile_subscriptions",
    "High-technology exports (% of manufactured exports)": "high_tech_exports",
    "Statistical Capacity Score (Overall Average) (scale 0 - 100)": "statistical_capacity",
    "Merchandise trade (% of GDP)": "merchandise_trade",
    "Net barter terms of trade index (2000 = 100)": "barter_terms",
    "External debt stocks, total (DOD, current US$)": "external_debt",
    "Total debt service (% of exports of goods, services and primary income)": "debt_service",
    "Net migration": "net_migration",
    "Personal remittances, received (current US$)": "remittances",
    "Foreign direct investment, net inflows (BoP, current US$)": "fdi_inflows",
    "Foreign direct investment, net (BoP, current US$)": "fdi_net",
    "Net official development assistance and official aid received (current US$)": "aid_received",
    "Net ODA received per capita (current US$)": "aid_per_capita",
    "GDP per capita (current US$)": "gdp_per_capita",
    "Inflation, consumer prices (annual %)": "consumer_inflation",
}

# Indicators modeled as categorical predictors
CATEGORICAL_INDICATORS = [
    "business_procedures",
]


# Model training defaults
DEFAULT_SEED = 42
TEST_SIZE = 0.2
N_RESAMPLES = 20
GRID_LEVELS = 20
RARE_LEVEL_SHARE = 0.05

# Regular-grid bounds, log10 scale for penalties
PENALTY_RANGE = (-10.0, 0.0)
MIXTURE_RANGE = (0.05, 1.0)
BART_TREES_RANGE = (1, 2000)
