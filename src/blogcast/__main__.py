from blogcast.main import main

main()
