#!/usr/bin/env python3
"""
test_security.py - Test the CSS, URL, data attribute and component validators
"""

import sys

from config import (
    configure, get_configuration, load_from_env, reset_configuration
)
from css_validator import (
    safe_bg_class, safe_text_class, safe_aspect_class, safe_grid_cols_class,
    safe_spacing_class, safe_shadow_class, safe_rounded_class, safe_text_size_class,
    safe_font_weight_class, valid_css_value, sanitize_css_value, safe_css_class,
    build_safe_class, safe_style, safe_transition_class, safe_duration_class,
    safe_scale_class, safe_opacity_class
)
from url_validator import (
    validate_url, validate_image_src, validate_script_src, validate_link_href,
    safe_placeholder_image, add_approved_domain, PLACEHOLDER_IMAGE
)
from data_attributes import (
    sanitize_data_key, sanitize_data_value, sanitize_stimulus_action,
    sanitize_stimulus_controller, sanitize_stimulus_target, sanitize_value,
    safe_data_attributes
)
from component_validator import (
    PropValidations, validate_component_name, validate_props, validate_story_names,
    sanitize_html, sanitize_css_class, sanitize_id, valid_url
)


def test_color_classes():
    """Test color builders fall back to fixed defaults."""
    assert safe_bg_class('blue') == 'bg-blue-500'
    assert safe_bg_class('blue', 700) == 'bg-blue-700'
    assert safe_bg_class('white') == 'bg-white'
    assert safe_bg_class('red; background: url(x)') == 'bg-gray-500'
    assert safe_text_class('green', '50') == 'text-green-50'
    assert safe_text_class(None) == 'text-gray-900'
    print("✅ Color classes")


def test_token_classes():
    assert safe_aspect_class('16/9') == 'aspect-16-9'
    assert safe_aspect_class('7/3') == 'aspect-square'
    assert safe_grid_cols_class(12) == 'grid-cols-12'
    assert safe_grid_cols_class(13) == 'grid-cols-1'
    assert safe_spacing_class('px', 4) == 'px-4'
    assert safe_spacing_class('px', '1/2') == 'px-1-2'
    assert safe_spacing_class('zz', 4) == 'zz-0'
    assert safe_spacing_class('p', 'evil') == 'p-0'
    assert safe_shadow_class('xl') == 'shadow-xl'
    assert safe_shadow_class('huge') == 'shadow'
    assert safe_rounded_class(None) == 'rounded'
    assert safe_text_size_class('9xl') == 'text-9xl'
    assert safe_font_weight_class('heavy') == 'font-normal'
    print("✅ Token classes")


def test_effect_classes():
    assert safe_transition_class() == 'transition'
    assert safe_transition_class('colors') == 'transition-colors'
    assert safe_transition_class('everything') == 'transition'
    assert safe_duration_class(150) == 'duration-150'
    assert safe_duration_class('150ms') == 'duration-200'
    assert safe_scale_class('110') == 'scale-110'
    assert safe_scale_class(-1) == 'scale-100'
    assert safe_opacity_class(0) == 'opacity-0'
    assert safe_opacity_class('45') == 'opacity-100'
    print("✅ Transition, duration, scale and opacity classes")


def test_css_sanitizers():
    assert valid_css_value('blue-500')
    assert not valid_css_value('blue;500')
    assert sanitize_css_value('red"><script>') == 'redscript'
    assert build_safe_class('bg', 'red-500') == 'bg-red-500'
    assert build_safe_class('bg', ';;', fallback='bg-white') == 'bg-white'
    assert build_safe_class(None, 'x') is None

    assert safe_css_class('hover:bg-blue-600 p-0.5')
    assert safe_css_class('grid-cols-[repeat(auto-fit,minmax(200px,1fr))]')
    assert not safe_css_class('a;b')
    assert not safe_css_class('x<script>')
    assert not safe_css_class('')
    print("✅ CSS sanitizers")


def test_safe_style():
    assert safe_style('color: red') == 'color: red'
    assert safe_style('width: expression(alert(1))') is None
    assert safe_style('background: url(javascript:alert(1))') is None
    assert safe_style('@import url(evil.css)') is None
    assert safe_style('background: url(data:text/html,x)') is None
    assert safe_style('background: url(data:image/png;base64,AAA)') is not None
    assert safe_style('') is None
    print("✅ Inline style validation")


def test_validate_url():
    """Test scheme, pattern and domain checks."""
    reset_configuration()
    assert validate_url('https://example.com/page') == 'https://example.com/page'
    assert validate_url('/relative/path') == '/relative/path'
    assert validate_url('/relative/path', allow_relative=False) is None
    assert validate_url('javascript:alert(1)') is None
    assert validate_url('JaVaScRiPt:alert(1)') is None
    assert validate_url('ftp://example.com/file') is None
    assert validate_url('data:text/html,<script>') is None
    assert validate_url('') is None
    assert validate_url(None) is None
    assert validate_url('https://evil.com/x', require_approved_domains=True, fallback='#') == '#'
    print("✅ URL validation")


def test_image_and_link_sources():
    reset_configuration()
    assert validate_image_src('https://images.unsplash.com/photo.jpg') == 'https://images.unsplash.com/photo.jpg'
    assert validate_image_src('https://sub.picsum.photos/1') == 'https://sub.picsum.photos/1'
    assert validate_image_src('https://evil.com/x.png') == PLACEHOLDER_IMAGE
    assert validate_image_src('javascript:alert(1)') is None
    assert validate_script_src('https://evil.com/x.js') is None
    assert validate_script_src('https://unpkg.com/lib.js') == 'https://unpkg.com/lib.js'
    assert validate_link_href('https://anywhere.org') == 'https://anywhere.org'
    assert validate_link_href('vbscript:x') is None
    print("✅ Image, script and link sources")


def test_approved_domains_at_runtime():
    reset_configuration()
    try:
        assert add_approved_domain('cdn.mysite.io')
        assert not add_approved_domain('bad domain!')
        assert not add_approved_domain('   ')
        assert validate_image_src('https://cdn.mysite.io/a.png') == 'https://cdn.mysite.io/a.png'
        assert get_configuration().domain_approved('img.CDN.mysite.io')
    finally:
        reset_configuration()
    assert validate_image_src('https://cdn.mysite.io/a.png') == PLACEHOLDER_IMAGE
    print("✅ Runtime approved domains")


def test_placeholder_image():
    assert safe_placeholder_image() == 'https://via.placeholder.com/400x400'
    assert safe_placeholder_image(200, 100, 'Hi there&x') == 'https://via.placeholder.com/200x100?text=Hi%20there%26x'
    print("✅ Placeholder image URL")


def test_data_attribute_sanitizing():
    assert sanitize_data_key('user_id') == 'data-user-id'
    assert sanitize_data_key('data-foo') == 'data-foo'
    assert sanitize_data_key('1abc') == 'data-x-1abc'
    assert sanitize_data_key('a"b<c') == 'data-abc'

    assert sanitize_data_value('<b>') == '&lt;b&gt;'
    assert sanitize_data_value('javascript:alert(1)') == ''
    assert sanitize_data_value('x onerror=alert(1)') == ''
    assert sanitize_data_value(None) == ''

    assert sanitize_value(True) == 'true'
    assert sanitize_value(3) == '3'
    assert sanitize_value({'a': 1}) == '{&#34;a&#34;: 1}'
    print("✅ Data attribute sanitizing")


def test_stimulus_sanitizing():
    assert sanitize_stimulus_action('click->modal#open') == 'click->modal#open'
    assert sanitize_stimulus_action(' submit -> form-ctrl#save ') == 'submit->form-ctrl#save'
    assert sanitize_stimulus_action('evil->modal#open') == ''
    assert sanitize_stimulus_action('click->modal#open;alert(1)') == ''
    assert sanitize_stimulus_action('click') == ''
    assert sanitize_stimulus_controller('my-ctrl<script>') == 'my-ctrlscript'
    assert sanitize_stimulus_target('panel-1') == 'panel1'

    attrs = safe_data_attributes(
        action='click->modal#open', controller='modal', target='panel',
        values={'open_state': False}, data={'item_id': 5}
    )
    assert attrs == {
        'data-action': 'click->modal#open',
        'data-controller': 'modal',
        'data-modal-target': 'panel',
        'data-modal-open-state-value': 'false',
        'data-item-id': '5',
    }
    print("✅ Stimulus sanitizing")


def test_prop_validations():
    """Test the declarative prop validation table."""
    rules = (
        PropValidations()
        .variant('variant')
        .size('size')
        .number('count', min=0, max=10)
        .url('href', allow_blank=True)
        .email('contact', allow_blank=True)
        .color('tint')
        .callable('on_select')
    )

    assert rules.validate({'variant': 'primary', 'size': 'md', 'count': 3, 'tint': 'blue-500'})

    try:
        rules.validate({
            'variant': 'fancy', 'size': 'md', 'count': 11, 'href': 'ftp://x',
            'contact': 'nope', 'tint': 'red;', 'on_select': 'not callable'
        })
        assert False, "Invalid props should raise"
    except ValueError as e:
        message = str(e)
        assert message.startswith("Component validation failed: ")
        assert "variant must be one of: primary, secondary" in message
        assert "count must be less than or equal to 10" in message
        assert "href must be a valid URL" in message
        assert "contact must be a valid email address" in message
        assert "tint must be a valid color name" in message
        assert "on_select must be a callable (function or method)" in message

    try:
        PropValidations().number('count').validate({'count': 'three'})
        assert False, "Non-numbers should raise"
    except ValueError as e:
        assert "count must be a number" in str(e)

    try:
        PropValidations().inclusion('x', None)
        assert False, "inclusion without values should raise"
    except ValueError:
        pass
    print("✅ Prop validations")


def test_name_validation():
    validate_component_name('ProfileCard')
    validate_props(['title', 'subtitle'])
    validate_story_names(['default', 'with_icon'])

    for bad_name in ['1Card', 'Card;rm', '', 'exec', 'system']:
        try:
            validate_component_name(bad_name)
            assert False, f"{bad_name!r} should be rejected"
        except ValueError:
            pass

    for bad_props in [['title; rm -rf /'], ['system']]:
        try:
            validate_props(bad_props)
            assert False, f"{bad_props!r} should be rejected"
        except ValueError:
            pass

    for bad_story in [['Default'], ['exec']]:
        try:
            validate_story_names(bad_story)
            assert False, f"{bad_story!r} should be rejected"
        except ValueError:
            pass
    print("✅ Name validation")


def test_component_sanitizers():
    assert sanitize_html('<i>x</i>') == '&lt;i&gt;x&lt;/i&gt;'
    assert sanitize_css_class('btn btn-primary"><') == 'btn btn-primary'
    assert sanitize_id('42') == 'id-42'
    assert sanitize_id('main nav') == 'mainnav'
    assert valid_url('https://example.com')
    assert not valid_url('example.com')
    assert valid_url('', allow_blank=True)
    print("✅ Component sanitizers")


def test_configuration():
    """Test configure(), reset and environment loading."""
    reset_configuration()
    config = get_configuration()
    assert config.maximum_component_depth == 50
    assert config.rate_limit_threshold == 10
    assert config.rate_limit_window == 60
    assert config.component_allowed('VStack')
    assert not config.component_allowed('Script')

    try:
        configure(rate_limit_threshold=3)
        assert get_configuration().rate_limit_threshold == 3

        try:
            configure(no_such_option=True)
            assert False, "Unknown options should raise"
        except AttributeError:
            pass

        load_from_env({
            'SWIFTUI_MAX_DEPTH': '12',
            'SWIFTUI_RATE_LIMIT': '0',
            'SWIFTUI_RATE_LIMIT_WINDOW': '30',
        })
        assert config.maximum_component_depth == 12
        assert config.rate_limit_actions is False
        assert config.rate_limit_window == 30
    finally:
        reset_configuration()

    assert get_configuration().rate_limit_threshold == 10
    print("✅ Configuration")


def run_all_tests():
    """Run all validator tests."""
    print("\n" + "="*60)
    print("🧪 Testing Security Validators")
    print("="*60 + "\n")

    tests = [
        test_color_classes,
        test_token_classes,
        test_effect_classes,
        test_css_sanitizers,
        test_safe_style,
        test_validate_url,
        test_image_and_link_sources,
        test_approved_domains_at_runtime,
        test_placeholder_image,
        test_data_attribute_sanitizing,
        test_stimulus_sanitizing,
        test_prop_validations,
        test_name_validation,
        test_component_sanitizers,
        test_configuration,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"❌ {test.__name__} FAILED: {e}")
            failed += 1
        except Exception as e:
            print(f"❌ {test.__name__} ERROR: {e}")
            failed += 1

    print("\n" + "="*60)
    print(f"📊 Results: {passed} passed, {failed} failed")
    print("="*60 + "\n")

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
