"""
Main NiceGUI application for OntoMaker.

Left sidebar with the add-node, export and theme controls; the diagram is an
interactive SVG image driven by GraphSyncController. A small panel edits the
label of the selected node or edge through the GraphStore, the same way the
full property forms do.
"""

from urllib.parse import quote

from nicegui import ui
from dotenv import load_dotenv
load_dotenv()

from ontomaker.config import get_theme, set_theme, get_export_base_uri, setup_logging
from ontomaker.store import GraphStore
from ontomaker.canvas.controller import GraphSyncController
from ontomaker.canvas.handlers import setup_canvas_handlers
from ontomaker.canvas.svg import render_svg
from ontomaker.export import export_json, export_filename

setup_logging()

CANVAS_WIDTH = 1600
CANVAS_HEIGHT = 1000
BLANK_CANVAS = 'data:image/svg+xml;charset=utf-8,' + quote(
    f'<svg xmlns="http://www.w3.org/2000/svg" width="{CANVAS_WIDTH}" height="{CANVAS_HEIGHT}"/>'
)


@ui.page('/')
def main_page():
    theme = get_theme()
    store = GraphStore()
    controller = GraphSyncController(store, theme=theme)
    dark = ui.dark_mode(theme == 'dark')
    state = {'canvas': None}

    def redraw():
        if state['canvas'] is None:
            return
        state['canvas'].set_content(render_svg(
            controller.nodes, controller.edges, controller.edge_geometries(), controller.theme
        ))

    def refresh():
        redraw()
        render_selection_panel.refresh()

    def add_node():
        node = controller.add_node()
        ui.notify(f"Added {node['data']['label']}", position='bottom', timeout=800)
        refresh()

    def export():
        content = export_json(store.nodes, store.edges, get_export_base_uri())
        ui.download(content.encode('utf-8'), export_filename())
        ui.notify('Your ontology has been exported successfully!', type='positive', position='bottom')

    def toggle_theme():
        new_theme = 'light' if controller.theme == 'dark' else 'dark'
        controller.set_theme(new_theme)
        dark.set_value(new_theme == 'dark')
        set_theme(new_theme)
        refresh()

    def rename_selected(e):
        element = store.selected_element()
        if element is None:
            return
        updated = {**element, 'data': {**(element.get('data') or {}), 'label': e.value}}
        if 'source' in element:
            updated['label'] = e.value
        store.update_element(updated)

    @ui.refreshable
    def render_selection_panel():
        element = store.selected_element()
        if element is None:
            ui.label('Select a node or relation to edit it').classes('text-xs text-gray-400')
            return
        kind = 'Relation' if 'source' in element else 'Entity'
        ui.label(kind).classes('text-sm font-bold')
        ui.input('Label', value=(element.get('data') or {}).get('label', ''),
                 on_change=rename_selected).props('dense outlined').classes('w-full')
        ui.label('Shift+Delete removes it').classes('text-xs text-gray-400')

    handlers = setup_canvas_handlers(controller, refresh)
    ui.keyboard(on_key=handlers['handle_keyboard'])

    with ui.row().classes('w-full h-screen no-wrap gap-0'):
        with ui.column().classes('w-64 h-full p-4 gap-3 border-r border-gray-300'):
            with ui.row().classes('w-full items-center justify-between'):
                ui.label('OntoMaker').classes('text-xl font-bold')
                ui.button(icon='dark_mode', on_click=toggle_theme).props('flat round dense').tooltip('Toggle theme')
            ui.button('+ Node', on_click=add_node).classes('w-full')
            ui.button('Export JSON-LD', on_click=export).props('color=positive').classes('w-full')
            ui.separator()
            render_selection_panel()

        with ui.element('div').classes('flex-1 h-full overflow-auto'):
            state['canvas'] = ui.interactive_image(
                BLANK_CANVAS,
                on_mouse=handlers['handle_mouse'],
                events=['mousedown', 'mouseup'],
                cross=False,
            )

    controller.on('nodes_changed', lambda _nodes: redraw())
    controller.on('edges_changed', lambda _edges: redraw())
    refresh()


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(title='OntoMaker', port=8081)
