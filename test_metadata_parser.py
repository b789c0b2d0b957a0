#!/usr/bin/env python3
"""
Tests for loading CSDL documents into the schema graph models.
"""

import unittest
from pathlib import Path
from unittest.mock import patch, MagicMock

import requests

from odata_codegen_lib import EdmType, InputError, MetadataParser, ParseError

TESTDATA = Path(__file__).parent / "testdata"

EDMX_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<edmx:Edmx Version="1.0" xmlns:edmx="http://schemas.microsoft.com/ado/2007/06/edmx">
  <edmx:DataServices>
    <Schema Namespace="Test" xmlns="http://schemas.microsoft.com/ado/2008/09/edm">
      {body}
    </Schema>
  </edmx:DataServices>
</edmx:Edmx>"""


def parse_body(body: str):
    return MetadataParser("inline.xml").parse_bytes(EDMX_TEMPLATE.format(body=body).encode("utf-8"))


class TestMetadataParser(unittest.TestCase):
    """Tests for MetadataParser against the fixture documents."""

    def test_parse_person_document(self):
        document = MetadataParser(str(TESTDATA / "person.xml")).parse()

        self.assertEqual(document.version, "1.0")
        self.assertEqual(document.source, str(TESTDATA / "person.xml"))
        self.assertEqual(len(document.schemas), 1)

        schema = document.schemas[0]
        self.assertEqual(schema.namespace, "Test")
        self.assertIsNone(schema.entity_sets())
        self.assertIsNone(document.default_schema())

        person = schema.entities[0]
        self.assertEqual(person.name, "Person")
        self.assertEqual(person.key, "Id")
        self.assertEqual([p.name for p in person.properties], ["Id", "Name"])
        self.assertEqual(person.properties[0].type, EdmType.INT32)
        self.assertFalse(person.properties[0].nullable)
        self.assertTrue(person.properties[1].nullable)
        self.assertEqual(person.key_property().name, "Id")

    def test_parse_shop_document(self):
        document = MetadataParser(str(TESTDATA / "shop.xml")).parse()

        self.assertEqual([s.namespace for s in document.schemas], ["Shop.Model", "Shop.Audit"])
        model = document.schemas[0]
        self.assertEqual(model.alias, "Self")
        self.assertEqual([e.name for e in model.entities], ["Customer", "Order", "OrderLine"])
        self.assertEqual([a.name for a in model.associations], ["CustomerOrders", "OrderLines"])

        customers = model.associations[0]
        self.assertEqual(customers.ends[0].role, "Customer")
        self.assertEqual(customers.ends[0].entity_type, "Shop.Model.Customer")
        self.assertEqual(customers.ends[0].multiplicity, "0..1")

        order = model.entities[1]
        self.assertEqual([n.name for n in order.navigations], ["Customer", "Lines"])
        self.assertEqual(order.navigations[1].to_role, "Lines")
        self.assertEqual(order.navigations[1].relationship, "Self.OrderLines")

        self.assertEqual(model.entity_container.name, "ShopEntities")
        self.assertTrue(model.entity_container.is_default)
        self.assertEqual([s.name for s in model.entity_sets()], ["Customers", "Orders", "OrderLines"])
        self.assertIs(document.default_schema(), model)

    def test_nullable_defaults_to_true(self):
        document = parse_body("""
            <EntityType Name="Thing">
              <Key><PropertyRef Name="Id" /></Key>
              <Property Name="Id" Type="Edm.Int32" Nullable="false" />
              <Property Name="Label" Type="Edm.String" />
            </EntityType>""")
        self.assertTrue(document.schemas[0].entities[0].properties[1].nullable)

    def test_older_edm_namespace_is_accepted(self):
        content = EDMX_TEMPLATE.format(body="").replace(
            "http://schemas.microsoft.com/ado/2008/09/edm", "http://schemas.microsoft.com/ado/2006/04/edm")
        document = MetadataParser("inline.xml").parse_bytes(content.encode("utf-8"))
        self.assertEqual(document.schemas[0].namespace, "Test")

    def test_malformed_xml_raises_parse_error(self):
        with self.assertRaises(ParseError):
            MetadataParser("inline.xml").parse_bytes(b"<edmx:Edmx")

    def test_wrong_root_raises_parse_error(self):
        with self.assertRaises(ParseError) as ctx:
            MetadataParser("inline.xml").parse_bytes(b"<feed></feed>")
        self.assertIn("Edmx", str(ctx.exception))

    def test_missing_data_services_raises_parse_error(self):
        content = b'<edmx:Edmx xmlns:edmx="http://schemas.microsoft.com/ado/2007/06/edmx"></edmx:Edmx>'
        with self.assertRaises(ParseError):
            MetadataParser("inline.xml").parse_bytes(content)

    def test_unsupported_type_raises_parse_error(self):
        with self.assertRaises(ParseError) as ctx:
            parse_body("""
                <EntityType Name="Thing">
                  <Key><PropertyRef Name="Id" /></Key>
                  <Property Name="Id" Type="Edm.Guid" Nullable="false" />
                </EntityType>""")
        self.assertIn("Edm.Guid", str(ctx.exception))
        self.assertIn("Thing.Id", str(ctx.exception))

    def test_missing_key_raises_parse_error(self):
        with self.assertRaises(ParseError):
            parse_body("""
                <EntityType Name="Thing">
                  <Property Name="Id" Type="Edm.Int32" Nullable="false" />
                </EntityType>""")

    def test_composite_key_raises_parse_error(self):
        with self.assertRaises(ParseError) as ctx:
            parse_body("""
                <EntityType Name="Thing">
                  <Key><PropertyRef Name="A" /><PropertyRef Name="B" /></Key>
                  <Property Name="A" Type="Edm.Int32" Nullable="false" />
                  <Property Name="B" Type="Edm.Int32" Nullable="false" />
                </EntityType>""")
        self.assertIn("exactly one key", str(ctx.exception))

    def test_key_must_reference_a_property(self):
        with self.assertRaises(ParseError) as ctx:
            parse_body("""
                <EntityType Name="Thing">
                  <Key><PropertyRef Name="Missing" /></Key>
                  <Property Name="Id" Type="Edm.Int32" Nullable="false" />
                </EntityType>""")
        self.assertIn("Missing", str(ctx.exception))

    def test_invalid_multiplicity_raises_parse_error(self):
        with self.assertRaises(ParseError):
            parse_body("""
                <Association Name="Broken">
                  <End Role="A" Type="Test.A" Multiplicity="many" />
                </Association>""")

    def test_missing_navigation_role_raises_parse_error(self):
        with self.assertRaises(ParseError) as ctx:
            parse_body("""
                <EntityType Name="Thing">
                  <Key><PropertyRef Name="Id" /></Key>
                  <Property Name="Id" Type="Edm.Int32" Nullable="false" />
                  <NavigationProperty Name="Other" />
                </EntityType>""")
        self.assertIn("ToRole", str(ctx.exception))

    def test_empty_namespace_raises_parse_error(self):
        content = EDMX_TEMPLATE.format(body="").replace('Namespace="Test"', 'Namespace=""')
        with self.assertRaises(ParseError):
            MetadataParser("inline.xml").parse_bytes(content.encode("utf-8"))

    def test_missing_file_raises_input_error(self):
        missing = str(TESTDATA / "does-not-exist.xml")
        with self.assertRaises(InputError) as ctx:
            MetadataParser(missing).parse()
        self.assertEqual(ctx.exception.path, missing)
        self.assertIn(missing, str(ctx.exception))


class TestMetadataParserFromService(unittest.TestCase):
    """Tests for fetching the document from an OData service."""

    def test_metadata_url(self):
        self.assertEqual(MetadataParser("https://example.com/odata/").metadata_url,
                         "https://example.com/odata/$metadata")
        self.assertEqual(MetadataParser("https://example.com/odata/$metadata").metadata_url,
                         "https://example.com/odata/$metadata")

    @patch('requests.Session.get')
    def test_parse_from_url(self, mock_get):
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.content = (TESTDATA / "person.xml").read_bytes()
        mock_get.return_value = mock_response

        parser = MetadataParser("https://example.com/odata/", auth=("user", "secret"), verbose=True)
        document = parser.parse()

        mock_get.assert_called_once_with("https://example.com/odata/$metadata")
        self.assertEqual(parser.session.auth, ("user", "secret"))
        self.assertEqual(document.schemas[0].entities[0].name, "Person")

    @patch('requests.Session.get')
    def test_http_error_raises_input_error(self, mock_get):
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("401 Unauthorized")
        mock_get.return_value = mock_response

        with self.assertRaises(InputError) as ctx:
            MetadataParser("https://example.com/odata").parse()
        self.assertEqual(ctx.exception.path, "https://example.com/odata/$metadata")
        self.assertIn("401", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
