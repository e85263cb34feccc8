from flask import Flask, request, jsonify
from flask_cors import CORS
import notation_compiler as compiler

app = Flask(__name__)
app.config.setdefault("MAX_DEPTH", compiler.MAX_DEPTH)
app.config.from_prefixed_env("NOTATION")  # NOTATION_MAX_DEPTH=32
CORS(app)  # allow cross-origin requests

def ast_to_dict(node):
    """
    Serialize AST to dict, children first so deep chains don't recurse
    """
    if node is None:
        return None
    built = {}
    for n in compiler.walk_postorder(node):
        d = {"type": type(n).__name__}
        if isinstance(n, compiler.Literal):
            d["value"] = n.value
            d["typ"] = n.typ
        elif isinstance(n, compiler.BinaryOp):
            d["op"] = n.op
            d["left"] = built.pop(id(n.left))
            d["right"] = built.pop(id(n.right))
        elif isinstance(n, compiler.UnaryOp):
            d["op"] = n.op
            d["operand"] = built.pop(id(n.operand))
        elif isinstance(n, compiler.FunctionCall):
            d["name"] = n.name
            d["argument"] = built.pop(id(n.argument))
        elif isinstance(n, compiler.Power):
            d["base"] = built.pop(id(n.base))
            d["exponent"] = built.pop(id(n.exponent))
        built[id(n)] = d
    return built[id(node)]

def read_expression():
    data = request.get_json(silent=True) or {}
    return str(data.get("expression", ""))

@app.route("/compile", methods=["POST"])
def compile_expression():
    expression = read_expression()
    try:
        result = compiler.compile_source(expression, max_depth=app.config["MAX_DEPTH"])

        # Process tokens to match terminal format
        processed_tokens = [
            {"type": token.type, "value": token.value, "pos": token.pos}
            for token in result['tokens']
        ]

        response = {
            "source": expression,
            "canonical": result['canonical'],
            "tokens": processed_tokens,
            "ast": ast_to_dict(result['ast']) if result['ast'] else {},
            "tree": result['tree'],
            "tac": [repr(t) for t in result['tac']],
            "c_code": result['c_code'],
            "errors": result['errors'],
        }
        return jsonify(response)
    except Exception as e:
        app.logger.exception("compile failed for %r", expression)
        return jsonify({
            "source": expression,
            "canonical": "",
            "tokens": [],
            "ast": {},
            "tree": "",
            "tac": [],
            "c_code": "",
            "errors": [f"Unexpected error: {str(e)}"],
        }), 500

@app.route("/translate", methods=["POST"])
def translate_expression():
    expression = read_expression()
    try:
        canonical = compiler.NotationTranslator(app.config["MAX_DEPTH"]).translate(expression)
    except compiler.TranslationError as e:
        return jsonify({"canonical": "", "errors": [str(d) for d in e.diagnostics]})
    return jsonify({"canonical": canonical, "errors": []})

if __name__ == "__main__":
    app.run(debug=True)
