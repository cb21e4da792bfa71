"""
JSON-LD export of the finalized diagram.

Entities become owl:Class entries, their properties owl:DatatypeProperty
entries, and relations owl:ObjectProperty entries with domain/range. The
graph is assembled in NetworkX first so relations whose endpoints no longer
exist are dropped.
"""

import json
from datetime import date
from typing import Dict, List, Any, Optional

import networkx as nx

from ontomaker.canvas.constants import DEFAULT_EDGE_LABEL, LANGUAGES

CONTEXT = {
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "owl": "http://www.w3.org/2002/07/owl#",
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "xsd": "http://www.w3.org/2001/XMLSchema#",
    "label": "rdfs:label",
    "comment": "rdfs:comment",
    "domain": "rdfs:domain",
    "range": "rdfs:range",
}

XSD_TYPES = {
    "string": "xsd:string",
    "number": "xsd:decimal",
    "boolean": "xsd:boolean",
    "date": "xsd:dateTime",
    "object": "xsd:anyURI",
    "array": "xsd:string",
}


def map_type_to_xsd(prop_type: str) -> str:
    return XSD_TYPES.get(prop_type, "xsd:string")


def _localized(values: Dict[str, str], fallback: str = "") -> List[Dict[str, str]]:
    return [{"@value": (values or {}).get(lang) or fallback, "@language": lang} for lang in LANGUAGES]


def entity_uri(node: Dict[str, Any], base_uri: str) -> str:
    return (node.get("data") or {}).get("uri") or f"{base_uri}/entity/{node['id']}"


def build_graph(nodes: List[Dict[str, Any]], edges: List[Dict[str, Any]]) -> nx.MultiDiGraph:
    """Entity nodes and the relations between them as a MultiDiGraph (parallel relations allowed)."""
    G = nx.MultiDiGraph()
    for node in nodes:
        if node.get("type", "entityNode") == "entityNode":
            G.add_node(node["id"], **node)
    for edge in edges or []:
        src, tgt = edge.get("source"), edge.get("target")
        # Only relations between exported entities
        if src in G.nodes and tgt in G.nodes:
            G.add_edge(src, tgt, key=edge["id"], **{k: v for k, v in edge.items() if k not in ("source", "target")})
    return G


def export_schema(nodes: List[Dict[str, Any]], edges: List[Dict[str, Any]],
                  base_uri: str = "http://example.org") -> Dict[str, Any]:
    """Convert the diagram into a JSON-LD document."""
    base_uri = base_uri.rstrip("/")
    G = build_graph(nodes, edges)
    graph: List[Dict[str, Any]] = []

    for node_id, node in G.nodes(data=True):
        data = node.get("data") or {}
        uri = entity_uri(node, base_uri)
        label = data.get("label", "")
        entity = {
            "@id": uri,
            "@type": "owl:Class",
            "label": _localized({lang: label for lang in LANGUAGES}),
            "comment": _localized(data.get("description") or {}),
        }

        properties = data.get("properties") or []
        if properties:
            entity["properties"] = [
                {
                    "@id": f"{uri}/property/{prop.get('name')}",
                    "@type": "owl:DatatypeProperty",
                    "domain": {"@id": uri},
                    "range": {"@id": map_type_to_xsd(prop.get("type"))},
                    "label": _localized(prop.get("label") or {}, fallback=prop.get("name", "")),
                }
                for prop in properties
            ]

        graph.append(entity)

    for src, tgt, edge_id, edge in G.edges(keys=True, data=True):
        label = (edge.get("data") or {}).get("label") or DEFAULT_EDGE_LABEL
        graph.append({
            "@id": f"{base_uri}/relation/{edge_id}",
            "@type": "owl:ObjectProperty",
            "label": _localized({lang: label for lang in LANGUAGES}),
            "domain": {"@id": entity_uri(G.nodes[src], base_uri)},
            "range": {"@id": entity_uri(G.nodes[tgt], base_uri)},
        })

    return {"@context": dict(CONTEXT), "@graph": graph}


def export_json(nodes: List[Dict[str, Any]], edges: List[Dict[str, Any]],
                base_uri: str = "http://example.org") -> str:
    return json.dumps(export_schema(nodes, edges, base_uri), indent=2, ensure_ascii=False)


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"ontology-export-{day.isoformat()}.json"
