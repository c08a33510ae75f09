from .documents import parse_json_text, parse_yaml_text, read_document, strip_json_comments

__all__ = ["parse_json_text", "parse_yaml_text", "read_document", "strip_json_comments"]
