from callmap.core import constants as cs
from callmap.data_models.models import Method
from callmap.parsers.languages.ruby import (
    MethodExclusionService,
    RailsImplicitMethodResolver,
)
from callmap.parsers.pre_scanner import PreScanIndex


def _definition(name: str, path: str, owner: str | None = None) -> Method:
    return Method(
        name=name,
        kind=cs.MethodKind.METHOD,
        file_path=path,
        start_line=1,
        end_line=1,
        owner=owner,
    )


def _index(*methods: Method) -> PreScanIndex:
    index = PreScanIndex()
    index.add_all(methods)
    return index.freeze()


class TestRailsImplicitMethodResolver:
    def test_included_module_methods_resolve_by_last_segment(self):
        index = _index(
            _definition("audit!", "app/models/concerns/auditable.rb", owner="Auditable")
        )
        resolution = RailsImplicitMethodResolver(index).resolve(
            "app/models/user.rb",
            ["class User < ApplicationRecord", "  include Concerns::Auditable", "end"],
        )
        assert "audit!" in resolution.explicit_includes

    def test_record_superclass_brings_model_methods(self):
        resolution = RailsImplicitMethodResolver().resolve(
            "lib/report.rb", ["class Report < Struct"]
        )
        assert resolution.inheritance_chain == set()

        resolution = RailsImplicitMethodResolver().resolve(
            "lib/report.rb", ["class Report < ApplicationRecord"]
        )
        assert "pluck" in resolution.inheritance_chain

    def test_application_controller_methods_are_inherited(self):
        index = _index(
            _definition(
                "require_admin",
                "app/controllers/application_controller.rb",
                owner="ApplicationController",
            )
        )
        resolution = RailsImplicitMethodResolver(index).resolve(
            "app/controllers/users_controller.rb",
            ["class UsersController < ApplicationController"],
        )
        assert "require_admin" in resolution.inheritance_chain
        assert "render" in resolution.inheritance_chain

    def test_concerns_autoload_by_directory(self):
        index = _index(
            _definition("authorize_admin", "app/controllers/concerns/authz.rb"),
            _definition("soft_delete", "app/models/concerns/deletable.rb"),
        )
        resolver = RailsImplicitMethodResolver(index)

        controller = resolver.resolve("app/controllers/users_controller.rb", [])
        assert controller.autoloaded_concerns == {"authorize_admin"}

        model = resolver.resolve("app/models/user.rb", [])
        assert model.autoloaded_concerns == {"soft_delete"}

    def test_standard_methods_follow_file_location(self):
        resolver = RailsImplicitMethodResolver()
        controller = resolver.resolve("app/controllers/a_controller.rb", [])
        assert "redirect_to" in controller.standard_methods
        assert "where" in resolver.resolve("app/models/a.rb", []).standard_methods
        assert "image_tag" in resolver.resolve("app/helpers/a.rb", []).standard_methods
        assert resolver.resolve("lib/tasks/a.rb", []).resolved_methods == set()


class TestMethodExclusionService:
    def test_controller_actions_are_excluded(self):
        path = "app/controllers/users_controller.rb"
        assert MethodExclusionService.is_excluded("index", path)
        assert not MethodExclusionService.is_clickable("destroy", path)

    def test_other_methods_and_files_are_not_excluded(self):
        controller = "app/controllers/users_controller.rb"
        assert not MethodExclusionService.is_excluded("load_user", controller)
        assert not MethodExclusionService.is_excluded("index", "app/models/user.rb")

    def test_applied_rule_describes_the_framework(self):
        rule = MethodExclusionService.applied_rule(
            "show", "app/controllers/posts_controller.rb"
        )
        assert rule is not None
        assert rule.framework == "rails"
