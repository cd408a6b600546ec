from sdkfox.plugins.luai.context import RuntimeContext


def test_user_agent_without_plugin():
    assert RuntimeContext("0.1.0").user_agent == "sdkfox/0.1.0"
    assert RuntimeContext("").user_agent == "sdkfox"


def test_user_agent_with_plugin_info():
    ctx = RuntimeContext("0.1.0")

    ctx.set_plugin_info("java", "1.2.3")

    assert ctx.plugin_info == ("java", "1.2.3")
    assert ctx.user_agent == "sdkfox/0.1.0 sdkfox-java/1.2.3"


def test_user_agent_keeps_existing_prefix_and_omits_empty_version():
    ctx = RuntimeContext("2.0.0")

    ctx.set_plugin_info("sdkfox-nodejs", "")

    assert ctx.user_agent == "sdkfox/2.0.0 sdkfox-nodejs"
