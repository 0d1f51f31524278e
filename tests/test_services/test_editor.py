from app.models.workflow import Step
from app.services import editor
from app.services.editor import EditorState, EditorWorkflow

CI_TEXT = '      - name: Checkout\n        uses: actions/checkout@v4\n      - name: Test\n        run: npm test\n'


def test_load_workflows_activates_first_file():
    files = [EditorWorkflow(name='ci.yml', path='.github/workflows/ci.yml', content=CI_TEXT)]
    state = editor.load_workflows(EditorState(), files)
    assert state.active_index == 0
    assert state.target_path == '.github/workflows/ci.yml'
    assert [s.name for s in state.steps] == ['Checkout', 'Test']
    assert state.status == 'Loaded 1 workflow file(s)'


def test_load_no_workflows_resets_to_default_path():
    state = editor.load_workflows(EditorState(steps=(Step(name='old'),)), [])
    assert state.steps == ()
    assert state.active_index == -1
    assert state.target_path == '.github/workflows/ci.yml'
    assert state.status.startswith('No workflows found')


def test_start_from_scratch_generates_placeholder_text():
    state = editor.start_from_scratch(EditorState())
    assert state.active_workflow.name == 'ci.yml'
    assert state.steps == ()
    assert state.text.startswith('name: ci\n')
    assert 'Hello from Workflow Studio' in state.text


def test_import_text_without_steps_is_an_error_and_keeps_state():
    original = EditorState(steps=(Step(name='keep'),))
    state = editor.import_text(original, 'nothing here', 'pasted YAML')
    assert state.steps == original.steps
    assert state.status == 'No steps found in pasted YAML'
    assert state.status_is_error


def test_import_text_creates_imported_workflow():
    state = editor.import_text(EditorState(), CI_TEXT)
    assert state.active_workflow.path == '.github/workflows/imported.yml'
    assert state.target_path == '.github/workflows/imported.yml'
    assert len(state.steps) == 2


def test_step_updates_are_pure():
    initial = EditorState()
    added = editor.add_step(initial, Step(name='Build', run='make'))
    assert initial.steps == ()
    assert added.steps == (Step(name='Build', run='make'),)

    updated = editor.update_step(added, 0, name=' ', uses='a/b@v1')
    assert updated.steps[0] == Step(name='Unnamed step', uses='a/b@v1')
    assert added.steps[0].name == 'Build'

    assert editor.delete_step(updated, 0).steps == ()
    assert editor.delete_step(updated, 5) is updated


def test_move_step_reorders_and_selects():
    state = EditorState(steps=(Step(name='a'), Step(name='b'), Step(name='c')))
    moved = editor.move_step(state, 0, 2)
    assert [s.name for s in moved.steps] == ['b', 'c', 'a']
    assert moved.selected_index == 2
    assert editor.move_step(state, 0, 9) is state


def test_render_canvas_projects_steps():
    state = editor.select_step(EditorState(steps=(Step(name='Checkout', uses='actions/checkout@v4'), Step(name='Empty'))), 1)
    nodes = editor.render_canvas(state)
    assert [(n.index, n.title, n.summary, n.active) for n in nodes] == [
        (1, 'Checkout', 'actions/checkout@v4', False),
        (2, 'Empty', '(empty step)', True),
    ]


def test_generate_text_uses_active_workflow_name():
    files = [EditorWorkflow(name='release.yaml', path='.github/workflows/release.yaml', content=CI_TEXT)]
    state = editor.load_workflows(EditorState(), files)
    text = editor.generate_text(state)
    assert text.startswith('name: release\n')
    assert '        uses: actions/checkout@v4\n' in text
