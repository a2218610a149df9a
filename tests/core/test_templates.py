from __future__ import annotations

from pathlib import Path

from tunnelboot.core.templates import (
    LaunchConfigOptions,
    ManifestOptions,
    format_ide_variables,
    format_shell_variables,
    launch_config_filename,
    quote,
    read_resource,
    render_launch_config,
    render_manifest,
)


def test_manifest_template_is_bundled() -> None:
    content = read_resource("manifest.yml.template").decode("utf-8")
    assert "APPNAME" in content
    assert "path: PATH" in content


def test_render_manifest_fills_placeholders_and_services() -> None:
    manifest = render_manifest(
        ManifestOptions(
            cf_application_name="fortune-tunnel",
            spring_application_name="fortune-service",
            app_path=Path("/tmp/stage/tunnelapp.jar"),
            services="registry, config",
        )
    )

    assert "- name: fortune-tunnel\n" in manifest
    assert "  path: /tmp/stage/tunnelapp.jar\n" in manifest
    assert "APPNAME" not in manifest
    assert "sidecar.port: 8080" in manifest
    assert manifest.endswith(
        "    spring.application.name: fortune-service\n"
        "  services:\n"
        "    - registry\n"
        "    -  config\n"
    )


def test_render_manifest_without_services() -> None:
    manifest = render_manifest(
        ManifestOptions(
            cf_application_name="demo",
            spring_application_name="demo-service",
            app_path=Path("tunnelapp.jar"),
            memory="1G",
            remote_port=9000,
        )
    )

    assert "services:" not in manifest
    assert "memory: 1G" in manifest
    assert "http://localhost:9000/health" in manifest
    assert manifest.endswith("    spring.application.name: demo-service\n")


def test_launch_config_includes_env_and_props() -> None:
    document = render_launch_config(
        LaunchConfigOptions(
            project_name="fortune-service",
            application_main="io.example.Application",
            port="18081",
            env_vars={"VCAP_SERVICES": '{"a":"b"}', "VCAP_APPLICATION": "{}"},
        )
    )

    assert document.startswith('<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n')
    assert '<mapEntry key="VCAP_SERVICES" value="{&quot;a&quot;:&quot;b&quot;}"/>' in document
    assert document.index("VCAP_APPLICATION") < document.index("VCAP_SERVICES")
    assert 'key="org.eclipse.jdt.launching.MAIN_TYPE" value="io.example.Application"' in document
    assert 'key="org.eclipse.jdt.launching.PROJECT_ATTR" value="fortune-service"' in document
    assert '<stringAttribute key="spring.boot.prop.server.port:1" value="118081"/>' in document
    assert '<stringAttribute key="spring.boot.prop.eureka.client.register-with-eureka:0" value="1false"/>' in document
    assert '<stringAttribute key="spring.boot.prop.spring.profiles.active:2" value="1cloud"/>' in document
    assert document.endswith("</launchConfiguration>\n")


def test_launch_config_omits_env_map_without_variables() -> None:
    document = render_launch_config(LaunchConfigOptions(project_name="p", application_main="m"))

    assert "environmentVariables" not in document


def test_quote_and_filenames() -> None:
    assert quote('say "hi"') == "say &quot;hi&quot;"
    assert launch_config_filename("fortune") == "fortune (local).launch"


def test_variable_listings() -> None:
    variables = {"VCAP_SERVICES": '{"a":"b"}', "VCAP_APPLICATION": "{}"}

    assert format_ide_variables(variables) == ["VCAP_APPLICATION={}", 'VCAP_SERVICES={"a":"b"}']
    assert format_shell_variables(variables) == ['VCAP_APPLICATION="{}"', 'VCAP_SERVICES="{\\"a\\":\\"b\\"}"']


def test_render_manifest_leaves_placeholder_words_in_values_alone() -> None:
    manifest = render_manifest(
        ManifestOptions(
            cf_application_name="MEMORY-cache-tunnel",
            spring_application_name="cache",
            app_path=Path("/tmp/APPNAME/REMOTE_PORT/tunnelapp.jar"),
        )
    )

    assert "- name: MEMORY-cache-tunnel\n" in manifest
    assert "  memory: 768M\n" in manifest
    assert "  path: /tmp/APPNAME/REMOTE_PORT/tunnelapp.jar\n" in manifest
    assert "sidecar.port: 8080\n" in manifest
