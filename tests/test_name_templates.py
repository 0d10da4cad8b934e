import pytest

from asset_manifest.errors import UnsupportedTemplateError
from asset_manifest.framework.templates import HashSpan, NameTemplateMatcher, Segment, parse_template


def test_parse_template_tags_placeholders_and_literals():
    assert parse_template("[dir]/[name]-[hash]FOO") == (
        Segment("dir"),
        Segment("literal", "/"),
        Segment("name"),
        Segment("literal", "-"),
        Segment("hash"),
        Segment("literal", "FOO"),
    )


@pytest.mark.parametrize(
    ("template", "filename", "hash_value", "stripped"),
    [
        ("[dir]/[name]-[hash]", "test/output/example-4EALSENI.js", "4EALSENI", "test/output/example.js"),
        ("[dir]/[name].[hash]", "test/output/example.LU3IRLCV.js", "LU3IRLCV", "test/output/example.js"),
        ("[dir]/[name][hash]", "test/output/exampleSVNZSNZX.js", "SVNZSNZX", "test/output/example.js"),
        (
            "[dir]/[name]-[hash]-FOO",
            "test/output/example-3D245B7Z-FOO.js",
            "3D245B7Z",
            "test/output/example-FOO.js",
        ),
        (
            "[dir]/[name]-[hash]FOO",
            "test/output/example-KFF5SEPEFOO.js",
            "KFF5SEPE",
            "test/output/exampleFOO.js",
        ),
        (
            "[dir]/[name][hash]FOO",
            "test/output/exampleKFF5SEPEFOO.css",
            "KFF5SEPE",
            "test/output/exampleFOO.css",
        ),
        (
            "assets/[name]-[hash]",
            "test/output/assets/example-KI5UE55D.png",
            "KI5UE55D",
            "test/output/assets/example.png",
        ),
        ("[dir]/[hash]-[name]", "test/output/ABCDEFGH-example.js", "ABCDEFGH", "test/output/example.js"),
    ],
)
def test_locates_and_strips_hash(template, filename, hash_value, stripped):
    matcher = NameTemplateMatcher(template)

    span = matcher.locate(filename)

    assert span is not None
    assert span.extract(filename) == hash_value
    assert matcher.strip(filename) == stripped


def test_strip_keeps_multi_part_extensions():
    matcher = NameTemplateMatcher("[dir]/[name]-[hash]")

    assert matcher.strip("test/output/example-4EALSENI.js.map") == "test/output/example.js.map"
    assert matcher.strip("test/output/example-4EALSENI.min.js") == "test/output/example.min.js"


def test_name_containing_hash_like_run_is_not_mistaken_for_the_hash():
    matcher = NameTemplateMatcher("[dir]/[name]-[hash]")
    filename = "dist/my-ABCDEFGH-lib-4EALSENI.js"

    assert matcher.locate(filename).extract(filename) == "4EALSENI"
    assert matcher.strip(filename) == "dist/my-ABCDEFGH-lib.js"


@pytest.mark.parametrize("hash_value", ["ABCD1234", "WXYZ9876"])
def test_dotted_name_with_digit_run_keeps_its_digits(hash_value):
    matcher = NameTemplateMatcher("[dir]/[name]-[hash]")
    filename = f"test/output/i18n-20240101.en-{hash_value}.js"

    assert matcher.locate(filename).extract(filename) == hash_value
    assert matcher.strip(filename) == "test/output/i18n-20240101.en.js"


def test_template_without_hash_has_no_span():
    matcher = NameTemplateMatcher("[dir]/[name]")

    assert matcher.has_hash is False
    assert matcher.locate("test/output/example.js") is None
    assert matcher.strip("test/output/example.js") == "test/output/example.js"


def test_filename_not_fitting_template_is_left_alone():
    matcher = NameTemplateMatcher("[dir]/[name]-[hash]")

    assert matcher.locate("test/output/example.js") is None
    assert matcher.strip("test/output/example.js") == "test/output/example.js"


@pytest.mark.parametrize(
    ("template", "filename", "hash_value"),
    [
        ("[dir]/[name]-[hash]", "test/output/example-4EALSENI.js", "4EALSENI"),
        ("[dir]/[name][hash]", "test/output/exampleSVNZSNZX.js", "SVNZSNZX"),
        ("[dir]/[name]-[hash]FOO", "test/output/example-KFF5SEPEFOO.js", "KFF5SEPE"),
        ("[dir]/[name]-[hash]", "test/output/i18n-20240101.en-ABCD1234.js", "ABCD1234"),
        ("[dir]/[name].[hash]", "test/output/v2.20240101.en.ABCD1234.js", "ABCD1234"),
    ],
)
def test_hash_location_does_not_depend_on_hash_value(template, filename, hash_value):
    matcher = NameTemplateMatcher(template)
    span = matcher.locate(filename)
    replaced = filename[: span.start] + "Z9Y8X7W6" + filename[span.end :]

    assert span.extract(filename) == hash_value
    assert matcher.locate(replaced) == span
    assert matcher.strip(replaced) == matcher.strip(filename)


def test_unbounded_hash_length_backtracks_before_uppercase_suffix():
    matcher = NameTemplateMatcher("[dir]/[name]-[hash]FOO", hash_length=None)
    filename = "out/example-KFF5SEPEFOO.js"

    assert matcher.locate(filename) == HashSpan(12, 20)
    assert matcher.strip(filename) == "out/exampleFOO.js"


def test_uppercase_prefix_directly_before_hash_is_rejected():
    with pytest.raises(UnsupportedTemplateError, match=r"uppercase"):
        NameTemplateMatcher("[dir]/[name]FOO[hash]")


def test_hash_in_directory_component_is_rejected():
    with pytest.raises(UnsupportedTemplateError, match=r"directory component"):
        NameTemplateMatcher("[hash]/[name]")


def test_multiple_hash_placeholders_are_rejected():
    with pytest.raises(UnsupportedTemplateError, match=r"more than one"):
        NameTemplateMatcher("[name]-[hash]-[hash]")
