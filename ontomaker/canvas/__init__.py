"""
Diagram canvas engine for OntoMaker.

- geometry: edge path and arrowhead marker computation
- layout: node overlap resolution
- connection: drag gesture -> directed edge
- controller: local/authoritative graph synchronization
- styles: theme palettes
- svg, handlers: rendering and event wiring for the NiceGUI page
"""
