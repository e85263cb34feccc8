import pytest

from app import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_compile_returns_every_artifact(client):
    response = client.post("/compile", json={"expression": r"\2/(a*8-8)"})
    assert response.status_code == 200
    data = response.get_json()
    assert data["errors"] == []
    assert data["canonical"] == "sqrt(a*8-8)"
    assert data["tokens"][0] == {"type": "FUNC", "value": "sqrt", "pos": 0}
    assert data["ast"]["type"] == "FunctionCall"
    assert data["ast"]["argument"]["op"] == "-"
    assert data["tac"][-1] == "a[5] = sqrt(a[4])"
    assert data["tree"].startswith("└── sqrt")
    assert data["c_code"] == "sqrt(((a * 8) - 8))"


def test_compile_serializes_power_and_negation(client):
    data = client.post("/compile", json={"expression": "-2^x"}).get_json()
    assert data["ast"] == {
        "type": "Power",
        "base": {"type": "UnaryOp", "op": "-", "operand": {"type": "Literal", "value": "2", "typ": "number"}},
        "exponent": {"type": "Literal", "value": "x", "typ": "identifier"},
    }


def test_compile_reports_diagnostics(client):
    response = client.post("/compile", json={"expression": "3+(8*2"})
    assert response.status_code == 200
    data = response.get_json()
    assert data["errors"] == ["UnbalancedGrouping: Unmatched opening parenthesis"]
    assert data["ast"] == {}
    assert data["tac"] == []


def test_compile_without_body(client):
    data = client.post("/compile").get_json()
    assert data["errors"] == ["EmptyExpression: Empty expression"]


def test_max_depth_comes_from_config(client):
    app.config["MAX_DEPTH"] = 1
    try:
        data = client.post("/compile", json={"expression": "((1))"}).get_json()
    finally:
        app.config["MAX_DEPTH"] = 64
    assert data["errors"][0].startswith("NestingTooDeep")


def test_translate(client):
    data = client.post("/translate", json={"expression": "log_2(8)"}).get_json()
    assert data == {"canonical": "log(8)/log(2)", "errors": []}


def test_translate_error(client):
    data = client.post("/translate", json={"expression": r"\2/(a"}).get_json()
    assert data["canonical"] == ""
    assert data["errors"][0].startswith("UnbalancedGrouping")
