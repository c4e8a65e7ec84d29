import pytest
from googleapiclient.errors import HttpError
from unittest.mock import MagicMock

from gwscli.commands.gslides import PlacementOptions, commands
from gwscli.flags import parse_flags


def shape(object_id, placeholder=None, text=None):
    s = {'shapeType': "TEXT_BOX"}
    if placeholder:
        s['placeholder'] = {'type': placeholder}
    if text is not None:
        s['text'] = {'textElements': [{'textRun': {'content': text}}]}
    return {'objectId': object_id, 'shape': s}


DECK = {'presentationId': "P1",
        'title': "Quarterly",
        'pageSize': {'width': {'magnitude': 9144000}, 'height': {'magnitude': 5143500}},
        'slides': [{'objectId': "s1", 'pageElements': [shape("t1", "TITLE", "Welcome\n"), shape("b1", "BODY")]},
                   {'objectId': "s2", 'pageElements': [shape("t2", "TITLE")]}]}


@pytest.fixture
def presentations(access):
    p = access.slides.presentations.return_value
    p.get.return_value.execute.return_value = DECK
    return p


def batch_requests(presentations) -> list:
    return presentations.batchUpdate.call_args.kwargs['body']['requests']


def test_placement_options():
    opts = PlacementOptions.from_flags(parse_flags(["P1", "--slide", "s1", "--x", "2.5"]), "usage", width=4, height=3)
    assert(opts.x == 2.5)
    assert(opts.y == 1)
    assert(opts.width == 4)
    props = opts.properties().to_base()
    assert(props['pageObjectId'] == "s1")
    assert(props['transform']['translateX'] == 2286000)


def test_create(run, access, capsys):
    access.slides.presentations.return_value.create.return_value.execute.return_value = {
        'presentationId': "P9", 'title': "Pitch", 'slides': [{}]}
    assert(run(commands, "create", "Pitch") == 0)
    access.slides.presentations.return_value.create.assert_called_with(body={'title': "Pitch"})
    out = capsys.readouterr().out
    assert("Presentation created: Pitch" in out)
    assert("https://docs.google.com/presentation/d/P9/edit" in out)
    assert("Slides: 1" in out)


def test_info(run, presentations, capsys):
    assert(run(commands, "info", "https://docs.google.com/presentation/d/P1/edit") == 0)
    presentations.get.assert_called_with(presentationId="P1")
    out = capsys.readouterr().out
    assert("Page Size: 10\" x 6\"" in out)
    assert("1. Welcome [ID: s1]" in out)
    assert("2. (No title) [ID: s2]" in out)


def test_create_slide_fills_placeholders_and_falls_back(run, presentations, capsys):
    presentations.batchUpdate.return_value.execute.return_value = {'replies': [{'createSlide': {'objectId': "s2"}}]}
    assert(run(commands, "create-slide", "P1", "--title", "Agenda", "--body", "One\\nTwo", "--bullets") == 0)
    first = presentations.batchUpdate.call_args_list[0].kwargs['body']['requests']
    assert(first == [{'createSlide': {'slideLayoutReference': {'predefinedLayout': "TITLE_AND_BODY"}}}])
    requests = batch_requests(presentations)
    assert(requests[0] == {'insertText': {'objectId': "t2", 'text': "Agenda", 'insertionIndex': 0}})
    assert(requests[1]['createShape']['objectId'].startswith("body_"))
    assert(requests[2]['insertText']['text'] == "• One\n• Two")
    assert(requests[3]['updateTextStyle']['style'] == {'fontSize': {'magnitude': 18, 'unit': "PT"}})
    out = capsys.readouterr().out
    assert("Slide created: s2" in out)
    assert("Title: Agenda" in out)


def test_update_slide(run, presentations, capsys):
    assert(run(commands, "update-slide", "P1", "--slide", "s1", "--title", "Hello") == 0)
    assert(batch_requests(presentations) == [
        {'deleteText': {'objectId': "t1", 'textRange': {'type': "ALL"}}},
        {'insertText': {'objectId': "t1", 'text': "Hello", 'insertionIndex': 0}}])
    assert("Slide updated!" in capsys.readouterr().out)


def test_update_slide_nothing_to_do(run, presentations, capsys):
    assert(run(commands, "update-slide", "P1", "--slide", "s1") == 0)
    assert("No updates specified." in capsys.readouterr().out)
    presentations.batchUpdate.assert_not_called()


def test_update_slide_not_found(run, presentations, capsys):
    assert(run(commands, "update-slide", "P1", "--slide", "nope", "--title", "X") == 1)
    assert("Slide not found: nope" in capsys.readouterr().err)


def test_add_slide(run, presentations, capsys):
    presentations.batchUpdate.return_value.execute.return_value = {'replies': [{'createSlide': {'objectId': "s3"}}]}
    assert(run(commands, "add-slide", "P1", "--layout", "fancy", "--index", "0") == 0)
    assert(batch_requests(presentations) == [
        {'createSlide': {'slideLayoutReference': {'predefinedLayout': "BLANK"}, 'insertionIndex': 0}}])
    assert("Slide ID: s3" in capsys.readouterr().out)


def test_add_text(run, presentations, capsys):
    assert(run(commands, "add-text", "P1", "--slide", "s1", "--text", "Hi", "--size", "24", "--bold") == 0)
    requests = batch_requests(presentations)
    assert(requests[0]['createShape']['shapeType'] == "TEXT_BOX")
    assert(requests[0]['createShape']['elementProperties']['size']['width']['magnitude'] == 8 * 914400)
    assert(requests[1]['insertText']['text'] == "Hi")
    assert(requests[2]['updateTextStyle']['fields'] == "fontSize,bold")
    assert("Text box added!" in capsys.readouterr().out)


def test_add_text_needs_text(run, presentations, capsys):
    assert(run(commands, "add-text", "P1", "--slide", "s1") == 0)
    assert("Usage: gslides add-text" in capsys.readouterr().out)
    presentations.batchUpdate.assert_not_called()


def test_add_shape(run, presentations, capsys):
    assert(run(commands, "add-shape", "P1", "--slide", "s1", "--type", "ellipse", "--fill", "red") == 0)
    requests = batch_requests(presentations)
    assert(len(requests) == 2)
    assert(requests[0]['createShape']['shapeType'] == "ELLIPSE")
    assert(requests[1]['updateShapeProperties']['shapeProperties'] == {
        'shapeBackgroundFill': {'solidFill': {'color': {'rgbColor': {'red': 1.0, 'green': 0.0, 'blue': 0.0}}}}})
    assert("Type: ELLIPSE" in capsys.readouterr().out)


def test_add_table(run, presentations, capsys):
    assert(run(commands, "add-table", "P1", "--slide", "s1", "--rows", "4", "--cols", "2") == 0)
    request = batch_requests(presentations)[0]['createTable']
    assert(request['rows'] == 4)
    assert(request['columns'] == 2)
    assert(request['elementProperties']['size']['height']['magnitude'] == 2 * 914400)
    assert("Size: 4x2" in capsys.readouterr().out)


def test_set_title_without_placeholder_adds_box(run, presentations, capsys):
    presentations.get.return_value.execute.return_value = {'slides': [{'objectId': "s9", 'pageElements': []}]}
    assert(run(commands, "set-title", "P1", "--slide", "s9", "--title", "Big") == 0)
    requests = batch_requests(presentations)
    assert(requests[0]['createShape']['elementProperties']['transform']['translateX'] == 457200)
    assert(requests[2]['updateTextStyle']['style']['fontSize'] == {'magnitude': 36, 'unit': "PT"})


def test_move_and_delete_slide(run, presentations, capsys):
    assert(run(commands, "move-slide", "P1", "--slide", "s2", "--index", "0") == 0)
    assert(batch_requests(presentations) == [{'updateSlidesPosition': {'slideObjectIds': ["s2"], 'insertionIndex': 0}}])
    assert(run(commands, "delete-slide", "P1", "--slide", "s2") == 0)
    assert(batch_requests(presentations) == [{'deleteObject': {'objectId': "s2"}}])


def test_set_background(run, presentations):
    assert(run(commands, "set-background", "P1", "--slide", "s1", "--image", "https://x/bg.png") == 0)
    request = batch_requests(presentations)[0]['updatePageProperties']
    assert(request['pageProperties'] == {'pageBackgroundFill': {'stretchedPictureFill': {'contentUrl': "https://x/bg.png"}}})
    assert(request['fields'] == "pageBackgroundFill")


def test_read(run, presentations, capsys):
    assert(run(commands, "read", "P1") == 0)
    out = capsys.readouterr().out
    assert("--- Slide 1 [s1] ---" in out)
    assert("[TITLE]" in out)
    assert("Welcome" in out)
    assert("--- Slide 2 [s2] ---" in out)
    assert("Total: 2 slides" in out)


def test_read_slide(run, presentations, capsys):
    assert(run(commands, "read-slide", "P1", "--slide", "2") == 0)
    out = capsys.readouterr().out
    assert("--- Slide 2 [s2] ---" in out)
    assert("Slide 1" not in out)
    assert(run(commands, "read-slide", "P1", "--slide", "5") == 0)
    assert("No slides found." in capsys.readouterr().out)


def test_export(run, access, tmp_path, capsys):
    access.drive.files.return_value.export.return_value.execute.return_value = b"%PDF"
    out = tmp_path / "deck.pdf"
    assert(run(commands, "export", "P1", "--output", str(out)) == 0)
    access.drive.files.return_value.export.assert_called_with(fileId="P1", mimeType="application/pdf")
    assert(out.read_bytes() == b"%PDF")
    assert(run(commands, "export", "P1", "--format", "key") == 0)
    assert("Supported formats: pdf, pptx, txt, png, odp" in capsys.readouterr().out)


def test_delete_needs_confirm(run, access, capsys):
    assert(run(commands, "delete", "P1") == 0)
    assert("Add --confirm" in capsys.readouterr().out)
    access.drive.files.return_value.delete.assert_not_called()
    assert(run(commands, "delete", "P1", "--confirm") == 0)
    access.drive.files.return_value.delete.assert_called_with(fileId="P1")


def test_from_template(run, access, presentations, capsys):
    access.drive.files.return_value.copy.return_value.execute.return_value = {'id': "P1"}
    assert(run(commands, "from-template", "T1", "--title", "Q3 Review") == 0)
    kwargs = access.drive.files.return_value.copy.call_args.kwargs
    assert(kwargs['fileId'] == "T1")
    assert(kwargs['body'] == {'name': "Q3 Review"})
    out = capsys.readouterr().out
    assert("Created from template!" in out)
    assert("Slides: 2" in out)


def test_masters(run, presentations, capsys):
    presentations.get.return_value.execute.return_value = {
        'title': "Themed",
        'masters': [{'objectId': "m1",
                     'pageProperties': {
                         'pageBackgroundFill': {'solidFill': {'color': {'rgbColor': {'red': 1, 'green': 1, 'blue': 1}}}},
                         'colorScheme': {'colors': [{'type': "ACCENT1", 'color': {'rgbColor': {'red': 1}}}]}}}],
        'layouts': [{'objectId': "l1", 'masterObjectId': "m1", 'layoutProperties': {'displayName': "Title slide"}},
                    {'objectId': "l2", 'masterObjectId': "m9", 'layoutProperties': {'name': "OTHER"}}]}
    assert(run(commands, "masters", "P1") == 0)
    out = capsys.readouterr().out
    assert("Master: m1" in out)
    assert("Background: rgb(255, 255, 255)" in out)
    assert("- Title slide [l1]" in out)
    assert("OTHER" not in out)
    assert("ACCENT1: #FF0000" in out)


def test_apply_layout(run, presentations):
    assert(run(commands, "apply-layout", "P1", "--slide", "s1", "--layout", "l1") == 0)
    assert(batch_requests(presentations) == [{'updateSlideProperties': {'objectId': "s1",
                                                                        'slideProperties': {'layoutObjectId': "l1"},
                                                                        'fields': "layoutObjectId"}}])


def test_copy_slide(run, presentations, capsys):
    presentations.get.return_value.execute.return_value = {'slides': [{
        'objectId': "s1",
        'pageProperties': {'pageBackgroundFill': {'solidFill': {'color': {'rgbColor': {'blue': 1}}}}},
        'pageElements': [shape("t1", "TITLE", "Copied"), {'objectId': "x", 'line': {}}]}]}
    presentations.batchUpdate.return_value.execute.return_value = {'replies': [{'createSlide': {'objectId': "n1"}}]}
    assert(run(commands, "copy-slide", "P1", "--slide", "s1", "--to", "P2", "--index", "1") == 0)
    first = presentations.batchUpdate.call_args_list[0].kwargs
    assert(first['presentationId'] == "P2")
    assert(first['body']['requests'] == [{'createSlide': {'insertionIndex': 1}}])
    requests = batch_requests(presentations)
    assert(requests[0]['updatePageProperties']['objectId'] == "n1")
    assert(requests[1]['createShape']['elementProperties']['pageObjectId'] == "n1")
    assert(requests[2]['insertText']['text'] == "Copied")
    assert(len(requests) == 3)
    assert("New Slide ID: n1" in capsys.readouterr().out)


def test_copy_slide_partial_failure_warns(run, presentations, capsys):
    presentations.get.return_value.execute.return_value = {'slides': [{
        'objectId': "s1", 'pageElements': [shape("t1", text="Copied")]}]}
    created = MagicMock()
    created.execute.return_value = {'replies': [{'createSlide': {'objectId': "n1"}}]}
    failed = MagicMock()
    failed.execute.side_effect = HttpError(MagicMock(status=400, reason="Bad Request"), b'{}')
    presentations.batchUpdate.side_effect = [created, failed]
    assert(run(commands, "copy-slide", "P1", "--slide", "s1", "--to", "P2") == 0)
    out = capsys.readouterr().out
    assert("Warning: Some elements could not be copied" in out)
    assert("Slide copied!" in out)


def test_copy_slide_missing(run, presentations, capsys):
    assert(run(commands, "copy-slide", "P1", "--slide", "zz", "--to", "P2") == 1)
    assert("Slide not found: zz" in capsys.readouterr().err)
    presentations.batchUpdate.assert_not_called()
