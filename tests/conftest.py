"""
Test configuration for the scholar_papers tests.
Contains fixtures and configuration for pytest.
"""
import os
import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so that `scholar_papers` imports without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")


def _read(name):
    with open(os.path.join(DATA_DIR, name), "r", encoding="utf-8") as f:
        return f.read()


@pytest.fixture
def sample_html_path():
    """Path to sample HTML files directory"""
    return DATA_DIR


@pytest.fixture
def sample_search_result_html():
    """Search results page for "quantum theory": 7 papers plus one entry without a title"""
    return _read("search_results.html")


@pytest.fixture
def sample_citations_html():
    """Citer list of "Significance of electromagnetic potentials in the quantum theory": 3 papers"""
    return _read("citations.html")


@pytest.fixture
def captcha_html():
    """Block page served by Google Scholar after too many requests"""
    return """
    <html>
    <head><title>Google Scholar</title></head>
    <body>
        <div id="gs_captcha_ccl">
            <h1>Please show you're not a robot</h1>
            <p>Our systems have detected unusual traffic from your computer network.</p>
            <form id="gs_captcha_f" action="/scholar_captcha" method="get">
                <div class="g-recaptcha" data-sitekey="abc123"></div>
            </form>
        </div>
    </body>
    </html>
    """


@pytest.fixture
def no_results_html():
    """Results page for a query that matched nothing"""
    return """
    <html><body>
    <div id="gs_res_ccl_mid">
        <div class="gs_med">
            <p>Your search - <b>zzqxv flurbopolis</b> - did not match any articles.</p>
        </div>
    </div>
    </body></html>
    """
