from datetime import date

from werkzeug.datastructures import MultiDict

from validation import Field, coerce_list, form_data, parse_date, validate


NAME_FIELDS = [
    Field("first_name").trim()
    .length(min=1, max=100, message="First name must be specified.")
    .escape()
    .alphanumeric("First name has non-alphanumeric characters."),
    Field("date_of_birth", "Invalid date.").optional().iso8601().to_date(),
]


def test_valid_input_is_trimmed_and_converted():
    result = validate({"first_name": "  Jane ", "date_of_birth": "1775-12-16"}, NAME_FIELDS)

    assert result.ok
    assert result["first_name"] == "Jane"
    assert result["date_of_birth"] == date(1775, 12, 16)


def test_empty_date_is_accepted_and_absent():
    result = validate({"first_name": "Jane", "date_of_birth": ""}, NAME_FIELDS)

    assert result.ok
    assert result["date_of_birth"] is None


def test_malformed_date_is_rejected_on_its_field():
    result = validate({"first_name": "Jane", "date_of_birth": "not-a-date"}, NAME_FIELDS)

    assert not result.ok
    assert [e.field for e in result.errors] == ["date_of_birth"]
    assert result.error_for("date_of_birth") == ["Invalid date."]


def test_missing_name_reports_every_failed_check():
    result = validate({}, NAME_FIELDS)

    assert result.error_for("first_name") == [
        "First name must be specified.",
        "First name has non-alphanumeric characters.",
    ]


def test_name_is_escaped_before_alphanumeric_check():
    result = validate({"first_name": "<b>"}, NAME_FIELDS)

    assert result["first_name"] == "&lt;b&gt;"
    assert result.error_for("first_name") == ["First name has non-alphanumeric characters."]


def test_overlong_name_is_rejected():
    result = validate({"first_name": "a" * 101}, NAME_FIELDS)

    assert result.error_for("first_name") == ["First name must be specified."]


def test_failures_across_fields_keep_declaration_order():
    result = validate({"first_name": "", "date_of_birth": "31/12/1999"}, NAME_FIELDS)

    assert [e.field for e in result.errors] == ["first_name", "first_name", "date_of_birth"]


def test_each_field_escapes_every_element():
    fields = [Field("genre", each=True).escape()]

    result = validate({"genre": ["1", "<2>"]}, fields)

    assert result.ok
    assert result["genre"] == ["1", "&lt;2&gt;"]


def test_unvalidated_fields_pass_through():
    result = validate({"first_name": "Jane", "extra": "x"}, NAME_FIELDS)

    assert result["extra"] == "x"


def test_coerce_list():
    assert coerce_list({}, "genre")["genre"] == []
    assert coerce_list({"genre": "g1"}, "genre")["genre"] == ["g1"]
    assert coerce_list({"genre": ["g1", "g2"]}, "genre")["genre"] == ["g1", "g2"]


def test_form_data_groups_repeated_keys():
    form = MultiDict([("title", "T"), ("genre", "1"), ("genre", "2")])

    assert form_data(form) == {"title": "T", "genre": ["1", "2"]}


def test_parse_date():
    assert parse_date("2024-02-29") == date(2024, 2, 29)
    assert parse_date("2024-02-29T10:30:00") == date(2024, 2, 29)
    assert parse_date("") is None
    assert parse_date("yesterday") is None


def test_each_field_wraps_a_scalar_value():
    fields = [Field("genre", each=True).escape()]

    assert validate({"genre": "12"}, fields)["genre"] == ["12"]
    assert validate({}, fields)["genre"] == []
