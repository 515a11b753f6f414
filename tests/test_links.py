"""Tests for outbound deep links."""

from scan2meet.links import (
    company_search_query,
    department_search_query,
    facebook_search_url,
    google_search_url,
    mailto_url,
    tel_url,
    website_url,
)
from scan2meet.models.business_card import BusinessCardData


class TestSearchUrls:
    def test_google(self):
        assert google_search_url("Yamada Taro") == "https://www.google.com/search?q=Yamada+Taro"

    def test_facebook(self):
        assert (
            facebook_search_url("山田 太郎")
            == "https://www.facebook.com/search_results/?q=%E5%B1%B1%E7%94%B0+%E5%A4%AA%E9%83%8E"
        )

    def test_empty_query(self):
        assert google_search_url("") is None
        assert facebook_search_url("") is None


class TestContactUrls:
    def test_tel(self):
        assert tel_url("03 1234 5678") == "tel:0312345678"
        assert tel_url("") is None

    def test_mailto(self):
        assert mailto_url("taro@acme.example") == "mailto:taro@acme.example"
        assert mailto_url("") is None

    def test_website_adds_scheme(self):
        assert website_url("acme.example") == "https://acme.example"
        assert website_url("http://acme.example") == "http://acme.example"
        assert website_url("https://acme.example/jp") == "https://acme.example/jp"
        assert website_url("") is None


class TestSearchQueries:
    def test_company(self):
        assert company_search_query(BusinessCardData(company="Acme")) == "Acme"
        assert company_search_query(BusinessCardData()) is None

    def test_department(self):
        card = BusinessCardData(company="Acme", department="Sales")
        assert department_search_query(card) == "Acme Sales"
        assert department_search_query(BusinessCardData(company="Acme")) is None
        assert department_search_query(BusinessCardData(department="Sales")) == "Sales"
