"""tunnel-boot: cf CLI plugin for tunnelling platform traffic to a local Spring Boot app."""
