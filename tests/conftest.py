"""
Pytest configuration and fixtures for silver-quality tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
import shutil
from datetime import date
from pathlib import Path
from typing import Generator

import pytest

from silver_quality.sources import InMemorySourceAdapter

PROJECT_ROOT = Path(__file__).resolve().parent.parent


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Spark or Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that run the full CLI"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SILVER LAYER FIXTURES
# =======================

def build_silver_tables() -> dict[str, list[dict]]:
    """
    Clean silver-layer sample satisfying every rule in config/silver_rules.yaml
    """
    return {
        "silver.crm_cust_info": [
            {"cst_id": 11000, "cst_key": "AW00011000", "cst_firstname": "Jon",
             "cst_lastname": "Yang", "cst_marital_status": "Married", "cst_gndr": "Male",
             "cst_create_date": date(2025, 10, 6)},
            {"cst_id": 11001, "cst_key": "AW00011001", "cst_firstname": "Eugene",
             "cst_lastname": "Huang", "cst_marital_status": "Single", "cst_gndr": "Male",
             "cst_create_date": date(2025, 10, 6)},
            {"cst_id": 11002, "cst_key": "AW00011002", "cst_firstname": "Ruben",
             "cst_lastname": "Torres", "cst_marital_status": "Married", "cst_gndr": "Male",
             "cst_create_date": date(2025, 10, 6)},
        ],
        "silver.crm_prd_info": [
            {"prd_id": 210, "cat_id": "CO_RF", "prd_key": "FR-R92B-58",
             "prd_nm": "HL Road Frame - Black- 58", "prd_cost": 0, "prd_line": "Road",
             "prd_start_dt": date(2003, 7, 1), "prd_end_dt": None},
            {"prd_id": 211, "cat_id": "AC_HE", "prd_key": "HL-U509-R",
             "prd_nm": "Sport-100 Helmet- Red", "prd_cost": 12, "prd_line": "Other Sales",
             "prd_start_dt": date(2011, 7, 1), "prd_end_dt": date(2012, 6, 27)},
            {"prd_id": 212, "cat_id": "AC_HE", "prd_key": "HL-U509-R",
             "prd_nm": "Sport-100 Helmet- Red", "prd_cost": 14, "prd_line": "Other Sales",
             "prd_start_dt": date(2012, 6, 28), "prd_end_dt": None},
        ],
        "silver.crm_sales_details": [
            {"sls_ord_num": "SO43697", "sls_prd_key": "FR-R92B-58", "sls_cust_id": 11000,
             "sls_order_dt": 20101229, "sls_ship_dt": 20110105, "sls_due_dt": 20110110,
             "sls_sales": 3578, "sls_quantity": 1, "sls_price": 3578},
            {"sls_ord_num": "SO43698", "sls_prd_key": "HL-U509-R", "sls_cust_id": 11001,
             "sls_order_dt": 20101229, "sls_ship_dt": 20110105, "sls_due_dt": 20110110,
             "sls_sales": 24, "sls_quantity": 2, "sls_price": 12},
        ],
        "silver.erp_cust_az12": [
            {"cid": "NASAW00011000", "bdate": date(1971, 10, 6), "gen": "Male"},
            {"cid": "AW00011001", "bdate": date(1976, 5, 10), "gen": "Male"},
            {"cid": "NASAW00011002", "bdate": date(1971, 2, 9), "gen": "Male"},
        ],
        "silver.erp_loc_a101": [
            {"cid": "AW-00011000", "cntry": "Australia"},
            {"cid": "AW-00011001", "cntry": "Australia"},
            {"cid": "AW-00011002", "cntry": "United States"},
        ],
        "silver.erp_px_cat_g1v2": [
            {"id": "CO_RF", "cat": "Components", "subcat": "Road Frames", "maintenance": "No"},
            {"id": "AC_HE", "cat": "Accessories", "subcat": "Helmets", "maintenance": "Yes"},
        ],
    }


@pytest.fixture(scope="function")
def silver_tables() -> dict[str, list[dict]]:
    """
    Fresh copy of the clean silver sample for a single test

    Returns:
        Mapping of table name to rows
    """
    return build_silver_tables()


@pytest.fixture(scope="function")
def silver_adapter(silver_tables) -> InMemorySourceAdapter:
    """
    In-memory row source over the clean silver sample

    Args:
        silver_tables: Silver sample fixture

    Returns:
        InMemorySourceAdapter
    """
    return InMemorySourceAdapter(silver_tables)


@pytest.fixture(scope="session")
def rules_path() -> Path:
    """
    Path to the shipped rule catalog

    Returns:
        Path to config/silver_rules.yaml
    """
    return PROJECT_ROOT / "config" / "silver_rules.yaml"


@pytest.fixture(scope="function")
def write_rules(tmp_path):
    """
    Write a YAML rule catalog to a temporary file

    Returns:
        Function taking YAML text and returning the file path
    """
    def _write(text: str, name: str = "rules.yaml") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session():
    """
    Create a Spark session for testing with local mode

    Skips when no Java runtime is available.

    Yields:
        SparkSession configured for local testing
    """
    if shutil.which("java") is None and not os.environ.get("JAVA_HOME"):
        pytest.skip("Java runtime not available for Spark")

    from pyspark.sql import SparkSession

    spark = (
        SparkSession.builder
        .appName("silver-quality-test")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.driver.memory", "1g")
        .config("spark.ui.enabled", "false")  # Disable UI for tests
        .config("spark.sql.warehouse.dir", "/tmp/spark-warehouse")
        .getOrCreate()
    )

    # Set log level to WARN to reduce test output noise
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    # Cleanup
    spark.stop()


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator:
    """
    Start PostgreSQL container for integration tests

    Skips when Docker is not reachable.

    Yields:
        PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="dq_reader",
        password="test_password",
        dbname="test_datawarehouse",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker not available for PostgreSQL container: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_settings(postgres_container) -> dict:
    """
    Connection settings for the PostgreSQL test container

    Returns:
        Keyword arguments for DatabaseConnectionPool
    """
    return {
        "host": postgres_container.get_container_host_ip(),
        "port": int(postgres_container.get_exposed_port(5432)),
        "database": "test_datawarehouse",
        "user": "dq_reader",
        "password": "test_password",
    }


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return Path(__file__).parent / "fixtures"
