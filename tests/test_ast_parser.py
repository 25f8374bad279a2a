from textwrap import dedent

from gojump.services.analysis.ast_parser import GoASTParser
from gojump.services.analysis.config import AnalysisConfig

from conftest import line_of


def parse(source: str, path: str = "/pkg/a.go"):
	return GoASTParser(AnalysisConfig()).parse_source(dedent(source), path)


def test_interface_methods_and_lines():
	code = """
	package shapes

	// Reader reads things.
	type Reader interface {
		Read(p []byte) (int, error)
		Close() error
	}
	"""
	facts = parse(code)
	assert facts.package_name == "shapes"
	assert len(facts.interfaces) == 1

	reader = facts.interfaces[0]
	assert reader.name == "Reader"
	assert reader.line == line_of(code, "type Reader")
	assert reader.file_path == "/pkg/a.go"
	assert [m.name for m in reader.methods] == ["Read", "Close"]
	assert reader.methods[0].line == line_of(code, "Read(p")
	assert reader.methods[1].line == line_of(code, "Close()")
	assert reader.internal_type is None


def test_embedded_interface_is_kept_apart_from_methods():
	facts = parse(
		"""
		package shapes

		type ReadCloser interface {
			Reader
			Close() error
		}
		"""
	)
	iface = facts.interfaces[0]
	assert [m.name for m in iface.methods] == ["Close"]
	assert iface.internal_type == "Reader"


def test_struct_fields_embedded_and_named():
	code = """
	package shapes

	type Wrapper struct {
		FileReader
		*Base
		io.Writer
		name string
		next *Node
		a, b int
	}
	"""
	facts = parse(code)
	struct = facts.structs[0]
	assert struct.name == "Wrapper"
	assert struct.line == line_of(code, "type Wrapper")

	fields = {f.name: f for f in struct.fields}
	assert set(fields) == {"FileReader", "Base", "io.Writer", "name", "next", "a", "b"}

	assert fields["FileReader"].embedded and not fields["FileReader"].is_pointer
	assert fields["Base"].embedded and fields["Base"].is_pointer
	assert fields["Base"].type_name == "Base"
	assert fields["io.Writer"].embedded

	assert not fields["name"].embedded
	assert fields["name"].type_name == "string"
	assert fields["next"].type_name == "Node" and fields["next"].is_pointer
	assert fields["a"].type_name == "int" and fields["b"].line == fields["a"].line

	for f in struct.fields:
		if f.embedded:
			assert f.name == f.type_name


def test_methods_with_value_pointer_and_generic_receivers():
	code = """
	package shapes

	type Stack[T any] struct {
		items []T
	}

	func (s *Stack[T]) Push(v T) {}

	func (s Stack[T]) Len() int { return len(s.items) }

	func (FileReader) Close() error { return nil }

	func helper() {}
	"""
	facts = parse(code)
	methods = {(m.receiver_type, m.method_name): m for m in facts.methods}
	assert set(methods) == {("Stack", "Push"), ("Stack", "Len"), ("FileReader", "Close")}
	assert methods[("Stack", "Push")].is_pointer
	assert not methods[("Stack", "Len")].is_pointer
	assert methods[("Stack", "Push")].line == line_of(code, "Push(v T)")


def test_explicit_declarations_in_both_languages():
	code = """
	package shapes

	// ensure Empty implements Reader
	type Empty struct{}

	// 确保 Other 实现 Closer
	type Other struct{}

	/*
	   Ensure Third implements Writer
	*/
	"""
	facts = parse(code)
	pairs = {(d.struct_name, d.interface_name): d for d in facts.declarations}
	assert set(pairs) == {("Empty", "Reader"), ("Other", "Closer"), ("Third", "Writer")}
	assert pairs[("Empty", "Reader")].line == line_of(code, "ensure Empty")
	assert pairs[("Third", "Writer")].line == line_of(code, "Ensure Third")


def test_ordinary_comments_are_not_directives():
	facts = parse(
		"""
		package shapes

		// This makes sure the reader implements nothing special.
		type Empty struct{}
		"""
	)
	assert facts.declarations == ()


def test_missing_package_clause_yields_empty_contribution():
	facts = parse("type A struct{}\n")
	assert facts.is_empty
	assert facts.structs == ()


def test_malformed_tail_keeps_earlier_declarations():
	facts = parse(
		"""
		package broken

		type Good interface {
			Do()
		}

		type Broken struct {
			x int
		"""
	)
	assert facts.package_name == "broken"
	assert "Good" in [i.name for i in facts.interfaces]


def test_unreadable_file_yields_empty_contribution(tmp_path):
	parser = GoASTParser(AnalysisConfig())
	facts = parser.parse_file(str(tmp_path / "missing.go"))
	assert facts.is_empty
